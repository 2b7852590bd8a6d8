from __future__ import annotations
import os, sys
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from multicore_scheduler.backend.schedulers import SchedulingController


def run():
    # Feed events by hand: two cores, a low-priority job gets preempted
    # and picks up again once a core frees.
    controller = SchedulingController()
    controller.start(2, "PPRI")

    def show(label, value):
        print(f"t={controller.current_time:>2} {label:<28} -> {value!s:<5} | {controller.show_queue()}")

    show("arrive job 0 (run 6, pri 3)", controller.job_arrived(0, 0, 6, 3))
    show("arrive job 1 (run 4, pri 2)", controller.job_arrived(1, 1, 4, 2))
    show("arrive job 2 (run 2, pri 1)", controller.job_arrived(2, 2, 2, 1))
    show("arrive job 3 (run 3, pri 4)", controller.job_arrived(3, 3, 3, 4))
    show("finish job 2 on core 0", controller.job_finished(0, 2, 4))
    show("finish job 1 on core 1", controller.job_finished(1, 1, 5))
    show("finish job 0 on core 0", controller.job_finished(0, 0, 8))
    show("finish job 3 on core 1", controller.job_finished(1, 3, 8))

    print('avg waiting:', controller.average_waiting_time())
    print('avg turnaround:', controller.average_turnaround_time())
    print('avg response:', controller.average_response_time())
    controller.shut_down()

if __name__ == '__main__':
    run()
