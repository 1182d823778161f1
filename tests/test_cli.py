import pytest

from securebox.cli import STRATEGIES, main, make_strategy, parse_strategies
from securebox.config import ConfigError
from securebox.strategies import LinearAlgebraPlan, RandomToggle


def test_opens_shuffled_box(capsys):
    assert main(["3", "4", "--seed", "11"]) == 0
    assert "BOX: OPENED!" in capsys.readouterr().out


def test_large_box_structured(capsys):
    assert main(["30", "31", "--seed", "2", "--method", "structured"]) == 0
    assert "BOX: OPENED!" in capsys.readouterr().out


def test_show_prints_grids(capsys):
    assert main(["2", "3", "--seed", "5", "--show"]) == 0
    out = capsys.readouterr().out.splitlines()
    # final grid printed just before the verdict
    assert out[-1] == "BOX: OPENED!"
    assert out[-4:-2] == ["000", "000"]


def test_zero_budget_reports_initial_state(capsys):
    code = main(["3", "3", "--seed", "4", "--budget", "0", "--show"])
    out = capsys.readouterr().out
    locked = "1" in out.split("BOX:")[0]
    assert code == (1 if locked else 0)
    assert ("BOX: LOCKED!" in out) == locked


@pytest.mark.parametrize("dims", [["0", "3"], ["3", "0"]])
def test_invalid_dimensions_exit_code(dims, capsys):
    assert main(dims) == 2
    captured = capsys.readouterr()
    assert "must be positive" in captured.err
    assert "BOX:" not in captured.out


def test_missing_config_exit_code(tmp_path):
    assert main(["2", "2", "--config", str(tmp_path / "nope.yaml")]) == 2


def test_config_strategy_used(tmp_path, capsys):
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "experiment:\n  strategies:\n    - name: linear_algebra_replanning\n",
        encoding="utf-8",
    )
    assert main(["2", "2", "--seed", "9", "--config", str(path)]) == 0


def test_bad_strategy_in_config(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("experiment:\n  strategies:\n    - teleport\n", encoding="utf-8")
    assert main(["2", "2", "--seed", "1", "--config", str(path)]) == 2


def test_log_file(tmp_path):
    log = tmp_path / "run.log"
    main(["2", "2", "--seed", "3", "--log-level", "info", "--log-file", str(log)])
    assert "Strategy linear_algebra used" in log.read_text(encoding="utf-8")


def test_make_strategy():
    assert isinstance(make_strategy("linear_algebra"), LinearAlgebraPlan)
    assert isinstance(make_strategy("RANDOM_TOGGLE"), RandomToggle)
    for name in STRATEGIES:
        make_strategy(name)
    with pytest.raises(ValueError, match="Unknown strategy"):
        make_strategy("teleport")


def test_parse_strategies():
    parsed = parse_strategies(["mask_toggle", {"name": "random_toggle"}])
    assert parsed == [
        {"name": "mask_toggle", "params": {}},
        {"name": "random_toggle", "params": {}},
    ]
    with pytest.raises(ConfigError):
        parse_strategies([42])


@pytest.mark.parametrize(
    "text",
    [
        "experiment:\n  board: [unclosed\n",
        "experiment:\n  budget_T: lots\n",
        "experiment:\n  solver: null\n",
    ],
)
def test_malformed_config_exit_code(tmp_path, capsys, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text, encoding="utf-8")
    assert main(["2", "2", "--seed", "1", "--config", str(path)]) == 2
    assert "Could not load config" in capsys.readouterr().err


def test_logs_stay_off_stdout(capsys):
    assert main(["2", "3", "--seed", "8", "--log-level", "debug"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "BOX: OPENED!\n"
    assert "Strategy linear_algebra used" in captured.err


def test_unknown_log_level_rejected():
    with pytest.raises(SystemExit):
        main(["2", "2", "--log-level", "chatty"])
