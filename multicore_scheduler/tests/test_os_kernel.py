from __future__ import annotations

import importlib.util
import json
import logging
from pathlib import Path

import pytest

from multicore_scheduler.backend.utils import JobSpec, TraceFormatError, generate_workload, load_trace
from multicore_scheduler.backend.os_kernel import SchedulerKernel, SimulationConfig, load_config


SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "run_simulation.py"


def load_cli():
    spec = importlib.util.spec_from_file_location("run_simulation", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestConfig:
    def test_defaults(self):
        config = SimulationConfig()
        assert (config.cores, config.discipline, config.quantum, config.show_queue) == (1, "FCFS", 2, False)

    def test_discipline_normalised(self):
        assert SimulationConfig(discipline="ppri").discipline == "PPRI"

    @pytest.mark.parametrize("kwargs", [{"cores": 0}, {"quantum": -1}, {"discipline": "MLFQ"}, {"cores": 1.5}])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)

    def test_from_dict_ignores_unknown_keys(self):
        config = SimulationConfig.from_dict({"cores": 4, "discipline": "RR", "colour": "blue"})
        assert config.cores == 4
        assert config.discipline == "RR"

    def test_load_config(self, tmp_path):
        path = write(tmp_path, "sim.json", json.dumps({"cores": 2, "discipline": "sjf", "quantum": 5}))
        config = load_config(path)
        assert (config.cores, config.discipline, config.quantum) == (2, "SJF", 5)

    def test_load_config_rejects_non_object(self, tmp_path):
        path = write(tmp_path, "sim.json", "[1, 2]")
        with pytest.raises(ValueError):
            load_config(path)


class TestTraceLoading:
    def test_headerless_rows(self, tmp_path):
        path = write(tmp_path, "proc.csv", "# arrival,run,priority\n0, 5, 1\n1, 3, 2\n\n")
        jobs = load_trace(path)
        assert [(j.job_id, j.arrival_time, j.run_time, j.priority) for j in jobs] == [(0, 0, 5, 1), (1, 1, 3, 2)]

    def test_header_with_ids(self, tmp_path):
        path = write(tmp_path, "proc.csv", "job_id,arrival_time,run_time,priority\n7,0,5,1\n9,2,3,0\n")
        jobs = load_trace(path)
        assert [j.job_id for j in jobs] == [7, 9]
        assert jobs[1].arrival_time == 2

    def test_header_without_priority(self, tmp_path):
        path = write(tmp_path, "proc.csv", "arrival_time,run_time\n0,4\n")
        assert load_trace(path)[0].priority == 0

    def test_missing_column(self, tmp_path):
        path = write(tmp_path, "proc.csv", "arrival_time,priority\n0,1\n")
        with pytest.raises(TraceFormatError):
            load_trace(path)

    def test_bad_value(self, tmp_path):
        path = write(tmp_path, "proc.csv", "0,5,1\n1,abc,1\n")
        with pytest.raises(TraceFormatError):
            load_trace(path)

    def test_non_integer_first_row_is_data(self, tmp_path):
        path = write(tmp_path, "proc.csv", "0.0,5,1\n1,3,2\n")
        with pytest.raises(TraceFormatError, match="job row 0"):
            load_trace(path)

    def test_invalid_rows_skipped(self, tmp_path, caplog):
        path = write(tmp_path, "proc.csv", "0,5,1\n2,0,1\n")
        with caplog.at_level(logging.WARNING):
            jobs = load_trace(path)
        assert len(jobs) == 1
        assert "Skipping job row 1" in caplog.text

    def test_empty_file(self, tmp_path):
        assert load_trace(write(tmp_path, "proc.csv", "")) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(TraceFormatError):
            load_trace(str(tmp_path / "nope.csv"))


def test_generate_workload_reproducible():
    a = generate_workload(20, seed=3)
    b = generate_workload(20, seed=3)
    assert a == b
    assert a[0].arrival_time == 0
    assert all(j.run_time >= 1 for j in a)
    assert all(0 <= j.priority < 5 for j in a)
    assert [j.arrival_time for j in a] == sorted(j.arrival_time for j in a)
    assert generate_workload(0) == []


def test_kernel_runs_trace(tmp_path):
    path = write(tmp_path, "proc.csv", "0,5,0\n1,3,0\n")
    kernel = SchedulerKernel(SimulationConfig(cores=1, discipline="FCFS"))
    result = kernel.run_trace(path)
    assert result.completion_times == {0: 5, 1: 8}
    assert result.avg_waiting_time == pytest.approx(2.0)


def test_kernel_show_queue_logs(caplog):
    kernel = SchedulerKernel(SimulationConfig(cores=1, discipline="RR", quantum=1, show_queue=True))
    with caplog.at_level(logging.INFO, logger="multicore_scheduler.backend.simulator"):
        kernel.run([JobSpec(0, 0, 2), JobSpec(1, 0, 2)])
    assert "1(-1) 0(0)" in caplog.text
    assert "0(-1) 1(0)" in caplog.text


class TestCommandLine:
    def test_trace_run(self, tmp_path, capsys):
        cli = load_cli()
        trace = write(tmp_path, "proc.csv", "0,5,0\n1,3,0\n")
        logs = tmp_path / "logs"
        code = cli.main(["--trace", trace, "--discipline", "fcfs", "--log-dir", str(logs)])
        out = capsys.readouterr().out
        assert code == 0
        assert "Avg waiting: 2.000" in out
        assert (logs / "run_fcfs_1.json").exists()
        assert (logs / "run_fcfs_1_timeline.csv").exists()

    def test_config_file_with_override(self, tmp_path, capsys):
        cli = load_cli()
        config = write(tmp_path, "sim.json", json.dumps({"cores": 2, "discipline": "RR", "quantum": 3}))
        code = cli.main(["--config", config, "--cores", "3", "--n", "5"])
        out = capsys.readouterr().out
        assert code == 0
        assert "RR on 3 core(s), 5 job(s)" in out

    def test_bad_trace_exit_code(self, tmp_path, capsys):
        cli = load_cli()
        code = cli.main(["--trace", str(tmp_path / "missing.csv")])
        assert code == 1
        assert "Error" in capsys.readouterr().err
