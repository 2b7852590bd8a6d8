from __future__ import annotations

import shlex
from typing import List, Optional
from colorama import Fore, Style, init as colorama_init

from .core import Discipline
from .utils import JobSpec
from .os_kernel import SimulationConfig, SchedulerKernel
from .visualizer import plot_gantt


class ManualTerminal:
    def __init__(self) -> None:
        colorama_init(autoreset=True)
        self.jobs: List[JobSpec] = []
        self.last_result = None

    def prompt(self) -> None:
        print(Fore.CYAN + "Scheduler terminal. Type 'help' for commands.")
        while True:
            try:
                raw = input(Fore.GREEN + "> ")
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not raw.strip():
                continue
            self.handle_command(raw)

    def handle_command(self, raw: str) -> None:
        try:
            parts = shlex.split(raw)
        except ValueError as e:
            print(Fore.RED + f"Parse error: {e}")
            return
        if not parts:
            return
        cmd, *args = parts
        cmd = cmd.lower()
        if cmd == "help":
            self._help()
        elif cmd == "add":
            self._add(args)
        elif cmd == "list":
            self._list()
        elif cmd == "clear":
            self.jobs.clear()
            print(Fore.CYAN + "Job list cleared")
        elif cmd == "run":
            self._run(args)
        elif cmd == "stats":
            self._stats()
        elif cmd == "exit" or cmd == "quit":
            raise SystemExit(0)
        else:
            print(Fore.YELLOW + "Unknown command. Type 'help'.")

    def _help(self) -> None:
        disciplines = "|".join(d.name for d in Discipline)
        print("Commands:")
        print("  add <arrival> <run_time> [priority=0]")
        print("  list")
        print("  clear")
        print(f"  run [--discipline {disciplines}] [--cores N] [--quantum Q] [--out path]")
        print("  stats")
        print("  exit")

    def _add(self, args: List[str]) -> None:
        if len(args) < 2:
            print(Fore.RED + "Usage: add <arrival> <run_time> [priority]")
            return
        try:
            arrival = int(args[0])
            run_time = int(args[1])
            priority = int(args[2]) if len(args) >= 3 else 0
        except ValueError:
            print(Fore.RED + "Invalid numeric values")
            return
        if arrival < 0 or run_time <= 0:
            print(Fore.RED + "Arrival must be >= 0 and run time > 0")
            return
        job_id = len(self.jobs)
        self.jobs.append(JobSpec(job_id=job_id, arrival_time=arrival, run_time=run_time, priority=priority))
        print(Fore.CYAN + f"Job {job_id} added: arrival={arrival}, run_time={run_time}, priority={priority}")

    def _list(self) -> None:
        if not self.jobs:
            print("No jobs yet")
            return
        for j in self.jobs:
            print(f"{j.job_id}: arrival={j.arrival_time}, run_time={j.run_time}, priority={j.priority}")

    def _run(self, args: List[str]) -> None:
        discipline = Discipline.FCFS.name
        cores = 1
        quantum = 2
        out_path: Optional[str] = None
        # Parse simple flags
        it = iter(args)
        for token in it:
            if token == "--discipline":
                discipline = next(it, discipline)
            elif token == "--cores":
                try:
                    cores = int(next(it))
                except (TypeError, ValueError):
                    pass
            elif token == "--quantum":
                try:
                    quantum = int(next(it))
                except (TypeError, ValueError):
                    pass
            elif token == "--out":
                out_path = next(it, None)

        try:
            config = SimulationConfig(cores=cores, discipline=discipline, quantum=quantum)
        except ValueError as e:
            print(Fore.RED + str(e))
            return

        result = SchedulerKernel(config).run(list(self.jobs))
        self.last_result = result
        print(Style.BRIGHT + f"Simulation finished at t={result.total_time}. "
              f"Avg waiting: {result.avg_waiting_time:.2f}, Avg turnaround: {result.avg_turnaround_time:.2f}, "
              f"Avg response: {result.avg_response_time:.2f}")
        if out_path:
            plot_gantt(result, out_path)
            print(Fore.CYAN + f"Saved plot to {out_path}")

    def _stats(self) -> None:
        if not self.last_result:
            print("No simulation yet")
            return
        r = self.last_result
        print(f"Discipline: {r.discipline} on {r.cores} core(s)")
        print(f"Avg waiting time: {r.avg_waiting_time:.3f}")
        print(f"Avg turnaround time: {r.avg_turnaround_time:.3f}")
        print(f"Avg response time: {r.avg_response_time:.3f}")
        for job_id, done in sorted(r.completion_times.items()):
            print(f"  job {job_id} completed at t={done}")


def main() -> None:
    ManualTerminal().prompt()


if __name__ == "__main__":
    main()
