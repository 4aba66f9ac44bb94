import json

import pytest
from life_cli import main as life_cli


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "life.yaml"
    path.write_text(
        f"database: {tmp_path / 'db' / 'life.duckdb'}\n"
        f"event_log: {tmp_path / 'events.log'}\n"
        "default_max_steps: 10\n"
        "open_retry_seconds: 0\n"
    )
    return path


def _run(config, capsys, *argv):
    """
    Helper that invokes the CLI and returns its stdout without the trailing newline.
    """
    life_cli(["--config", str(config), *argv])
    return capsys.readouterr().out.rstrip("\n")


def test_plus_board_end_to_end(config, capsys):
    board_id = _run(config, capsys, "create", "--state", "010", "111", "010")
    assert board_id == "1"
    assert _run(config, capsys, "show", board_id) == "010\n111\n010"
    assert _run(config, capsys, "next", board_id) == "111\n101\n111"
    assert _run(config, capsys, "at", board_id, "1") == "111\n101\n111"
    assert _run(config, capsys, "final", board_id) == "000\n000\n000"


def test_create_from_state_file(config, capsys, tmp_path):
    state = tmp_path / "board.txt"
    state.write_text("0110\n0110\n")
    board_id = _run(config, capsys, "create", "--state-file", str(state))
    assert _run(config, capsys, "show", board_id) == "0110\n0110"


def test_create_random_is_seeded(config, capsys):
    first = _run(config, capsys, "create", "--random", "--rows", "6", "--cols", "6", "--seed", "5")
    second = _run(config, capsys, "create", "--random", "--rows", "6", "--cols", "6", "--seed", "5")
    assert first != second
    assert _run(config, capsys, "show", first) == _run(config, capsys, "show", second)


def test_random_needs_dimensions(config):
    with pytest.raises(SystemExit) as exc:
        life_cli(["--config", str(config), "create", "--random", "--rows", "4"])
    assert exc.value.code == "--random needs both --rows and --cols"


def test_malformed_state_exits_with_error(config):
    with pytest.raises(SystemExit) as exc:
        life_cli(["--config", str(config), "create", "--state", "012", "000"])
    assert str(exc.value.code).startswith("error:")


def test_dimension_mismatch_exits_with_error(config):
    with pytest.raises(SystemExit) as exc:
        life_cli(["--config", str(config), "create", "--state", "01", "10", "--rows", "3"])
    assert str(exc.value.code).startswith("error:")


def test_missing_step_and_board(config, capsys):
    board_id = _run(config, capsys, "create", "--state", "000", "010", "000")
    with pytest.raises(SystemExit) as exc:
        life_cli(["--config", str(config), "at", board_id, "4"])
    assert exc.value.code == "Step not found"

    with pytest.raises(SystemExit) as exc:
        life_cli(["--config", str(config), "show", "42"])
    assert exc.value.code == "Board not found"


def test_blinker_does_not_stabilize(config, capsys):
    board_id = _run(config, capsys, "create", "--state", "000", "111", "000")
    with pytest.raises(SystemExit) as exc:
        life_cli(["--config", str(config), "final", board_id, "--max-steps", "3"])
    assert exc.value.code == "Board did not reach a stable state"


def test_export_writes_one_line_per_generation(config, capsys, tmp_path):
    board_id = _run(config, capsys, "create", "--state", "010", "111", "010")
    _run(config, capsys, "next", board_id)
    _run(config, capsys, "next", board_id)

    outfile = tmp_path / "nested" / "board.jsonl"   # nested dir exercises mkdir
    _run(config, capsys, "export", board_id, "--outfile", str(outfile))

    records = [json.loads(line) for line in outfile.read_text().splitlines()]
    assert [r["step"] for r in records] == [0, 1, 2]
    assert records[1]["state"] == "111\n101\n111"
    assert records[1]["population"] == 8
    assert all(r["board"] == int(board_id) for r in records)


def test_delete(config, capsys):
    board_id = _run(config, capsys, "create", "--state", "1")
    assert _run(config, capsys, "delete", board_id) == board_id
    with pytest.raises(SystemExit) as exc:
        life_cli(["--config", str(config), "show", board_id])
    assert exc.value.code == "Board not found"


def test_events_written(config, capsys, tmp_path):
    board_id = _run(config, capsys, "create", "--state", "000", "010", "000")
    _run(config, capsys, "final", board_id)
    events = [json.loads(l)["event"] for l in (tmp_path / "events.log").read_text().splitlines()]
    # step 1 is all dead, step 2 repeats it
    assert events == [
        "board_created",
        "generation_advanced",
        "generation_advanced",
        "convergence_reached",
    ]


def test_bad_config(tmp_path):
    path = tmp_path / "life.yaml"
    path.write_text("default_max_steps: -4\n")
    with pytest.raises(SystemExit) as exc:
        life_cli(["--config", str(path), "show", "1"])
    assert str(exc.value.code).startswith("config error:")
