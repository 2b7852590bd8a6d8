from __future__ import annotations

from typing import Optional
import os
import matplotlib.pyplot as plt

from .simulator import SimulationResult


def ensure_dir(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def plot_gantt(result: SimulationResult, out_path: Optional[str] = None) -> None:
    # One row per core
    fig, ax = plt.subplots(figsize=(12, 2 + 0.6 * max(1, result.cores)))

    id_to_color = {j.job_id: j.color for j in result.jobs}

    for seg in result.logger.timeline:
        start = seg["start"]
        end = seg["end"]
        job_id = seg["job_id"]
        ax.barh(seg["core"], end - start, left=start, color=id_to_color.get(job_id, "#777777"),
                edgecolor="black", alpha=0.9)
        ax.text(start + (end - start) / 2, seg["core"], str(job_id), ha="center", va="center", fontsize=8)
        if seg.get("reason") == "preempted":
            ax.axvline(end, color="#aa3333", linestyle=":", alpha=0.6)

    ax.set_yticks(list(range(result.cores)))
    ax.set_yticklabels([f"core {i}" for i in range(result.cores)])
    ax.invert_yaxis()
    ax.set_xlabel("Time")
    ax.set_title(
        f"{result.discipline} on {result.cores} core(s): "
        f"wait {result.avg_waiting_time:.2f}, turnaround {result.avg_turnaround_time:.2f}, "
        f"response {result.avg_response_time:.2f}"
    )
    ax.grid(True, axis="x", linestyle=":", alpha=0.5)
    fig.tight_layout()

    if out_path:
        ensure_dir(out_path)
        fig.savefig(out_path, dpi=150)
        plt.close(fig)
    else:
        plt.show()
