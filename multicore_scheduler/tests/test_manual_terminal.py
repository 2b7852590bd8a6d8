import pytest

from multicore_scheduler.backend import manual_terminal
from multicore_scheduler.backend.manual_terminal import ManualTerminal


@pytest.fixture
def terminal(monkeypatch):
    # Keep colorama from re-wrapping the captured stdout
    monkeypatch.setattr(manual_terminal, "colorama_init", lambda **kwargs: None)
    return ManualTerminal()


def test_add_and_list(terminal, capsys):
    terminal.handle_command("add 0 5 1")
    terminal.handle_command("add 1 3")
    terminal.handle_command("list")
    out = capsys.readouterr().out
    assert "Job 0 added: arrival=0, run_time=5, priority=1" in out
    assert "1: arrival=1, run_time=3, priority=0" in out
    assert [j.job_id for j in terminal.jobs] == [0, 1]


def test_add_rejects_bad_input(terminal, capsys):
    terminal.handle_command("add 0")
    terminal.handle_command("add zero 5")
    terminal.handle_command("add 0 0")
    out = capsys.readouterr().out
    assert "Usage" in out
    assert "Invalid numeric values" in out
    assert terminal.jobs == []


def test_run_and_stats(terminal, capsys):
    terminal.handle_command("add 0 5")
    terminal.handle_command("add 1 3")
    terminal.handle_command("run --discipline fcfs --cores 1")
    terminal.handle_command("stats")
    out = capsys.readouterr().out
    assert "Simulation finished at t=8" in out
    assert "Avg waiting time: 2.000" in out
    assert "job 1 completed at t=8" in out
    assert terminal.last_result.discipline == "FCFS"


def test_run_rejects_bad_config(terminal, capsys):
    terminal.handle_command("run --discipline LOTTERY")
    assert "unknown discipline" in capsys.readouterr().out
    assert terminal.last_result is None


def test_stats_before_run(terminal, capsys):
    terminal.handle_command("stats")
    assert "No simulation yet" in capsys.readouterr().out


def test_unknown_and_exit(terminal, capsys):
    terminal.handle_command("frobnicate")
    assert "Unknown command" in capsys.readouterr().out
    with pytest.raises(SystemExit):
        terminal.handle_command("exit")
