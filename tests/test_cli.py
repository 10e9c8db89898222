from pathlib import Path

from procsched.cli import main

WORKLOAD = (
    '[{"arrival_time": 0, "burst_time": 5, "priority": 2},'
    ' {"arrival_time": 1, "burst_time": 3, "priority": 1},'
    ' {"arrival_time": 2, "burst_time": 8, "priority": 3}]'
)


def _workload(tmp_path: Path) -> Path:
    p = tmp_path / "w.json"
    p.write_text(WORKLOAD)
    return p


def test_run_prints_results(tmp_path: Path, capsys):
    assert main(["run", "-p", "sjf", "-w", str(_workload(tmp_path))]) == 0
    out = capsys.readouterr().out
    assert "Preemptive Shortest Job First (SJF)" in out
    assert "Average waiting time" in out
    assert "3.00" in out


def test_run_round_robin_needs_quantum(tmp_path: Path, capsys):
    assert main(["run", "-p", "rr", "-w", str(_workload(tmp_path))]) == 1
    assert "positive integer quantum" in capsys.readouterr().out
    assert main(["run", "-p", "rr", "-q", "4", "-w", str(_workload(tmp_path))]) == 0


def test_run_unknown_policy(tmp_path: Path, capsys):
    assert main(["run", "-p", "mlfq", "-w", str(_workload(tmp_path))]) == 1
    assert "Unknown policy" in capsys.readouterr().out


def test_run_empty_workload(tmp_path: Path, capsys):
    p = tmp_path / "empty.json"
    p.write_text("[]")
    assert main(["run", "-p", "fcfs", "-w", str(p)]) == 1
    assert "No processes" in capsys.readouterr().out


def test_compare(tmp_path: Path, capsys):
    assert main(["--memory-sim", "compare", "-w", str(_workload(tmp_path)), "-q", "4"]) == 0
    out = capsys.readouterr().out
    for name in ("FCFS", "(SJF)", "Priority", "(RR)"):
        assert name in out
    assert "5.33" in out


def test_capacity_flag(tmp_path: Path, capsys):
    assert main(["--capacity", "2", "compare", "-w", str(_workload(tmp_path))]) == 1
    assert "Maximum process limit" in capsys.readouterr().out


def test_menu_add_run_and_quit(tmp_path: Path, capsys, monkeypatch):
    saved = tmp_path / "saved.json"
    answers = iter(["1", "0", "5", "2", "1", "1", "3", "1", "9", "2", "8", str(saved), "5", "", "q"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

    assert main(["menu"]) == 0

    out = capsys.readouterr().out
    assert "Process P1 added" in out
    assert "Invalid selection" in out
    assert "First-Come, First-Served (FCFS)" in out
    assert "Round Robin (RR)" in out
    assert saved.exists()


def test_run_shows_response_and_starvation(tmp_path: Path, capsys):
    assert main(["run", "-p", "fcfs", "-w", str(_workload(tmp_path))]) == 0
    out = capsys.readouterr().out
    assert "Average response time" in out
    assert "Starvation count" in out


def test_run_plain_gantt(tmp_path: Path, capsys):
    assert main(["run", "-p", "rr", "-q", "4", "--plain", "-w", str(_workload(tmp_path))]) == 0
    out = capsys.readouterr().out
    assert "Gantt Chart:" in out
    assert "|   P1   |" in out


def test_menu_exits_cleanly_when_input_closes(capsys, monkeypatch):
    answers = iter(["1", "0"])

    def fake_input(prompt=""):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)

    assert main(["menu"]) == 0
    assert "Input closed" in capsys.readouterr().out
