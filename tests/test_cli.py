"""
Unit tests for the cli module.
"""

import builtins

import pytest

from wxdash.cli import handle, main, setup_parser


def _feed(monkeypatch, lines):
    it = iter(lines)

    def fake_input(prompt=""):
        try:
            return next(it)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr(builtins, "input", fake_input)


def test_parser_defaults():
    args = setup_parser().parse_args([])
    assert args.data is None
    assert args.config is None
    assert args.verbose is False


def test_stats(dashboard, capsys):
    handle(dashboard, "stats")
    out = capsys.readouterr().out
    assert "Total Damage Cost: $1,240,000" in out
    assert "Weather Events: 7" in out


def test_values(dashboard, capsys):
    handle(dashboard, "values year")
    assert capsys.readouterr().out.split() == ["2022", "2023", "2024"]
    with pytest.raises(ValueError):
        handle(dashboard, "values country")


def test_filter_and_categories(dashboard, capsys):
    handle(dashboard, 'filter category "Winter Storm"')
    assert "Size=1" in capsys.readouterr().out
    handle(dashboard, "categories")
    out = capsys.readouterr().out
    assert "Winter Storm" in out and "100%" in out
    handle(dashboard, "filter year 1999")
    handle(dashboard, "categories")
    assert "No events in current filter." in capsys.readouterr().out
    handle(dashboard, "reset")
    assert dashboard.selection.year is None and dashboard.selection.category is None


def test_filter_usage_error(dashboard):
    with pytest.raises(ValueError):
        handle(dashboard, "filter year")
    with pytest.raises(ValueError):
        handle(dashboard, "filter branch Army")


def test_views(dashboard, capsys):
    handle(dashboard, "installations")
    assert capsys.readouterr().out.splitlines()[0].startswith("Fort Stewart")
    handle(dashboard, "trend")
    assert "2022" in capsys.readouterr().out
    handle(dashboard, "events 2")
    assert len(capsys.readouterr().out.splitlines()) == 2
    handle(dashboard, "markers")
    assert "Camp Zama" not in capsys.readouterr().out
    handle(dashboard, "forecast")
    assert "$18,000,000" in capsys.readouterr().out
    handle(dashboard, "budget")
    assert "ROI 1.7x" in capsys.readouterr().out


def test_scenario_commands(dashboard, capsys):
    handle(dashboard, "select scenario1 scenario2")
    handle(dashboard, "scenarios")
    out = capsys.readouterr().out
    assert "scenario1 (Enhanced stormwater infrastructure): selected" in out
    assert "[*] scenario1" in out and "[ ] scenario3" in out
    handle(dashboard, "run")
    out = capsys.readouterr().out
    assert "With Mitigation:    $16,537,500" in out
    assert "Estimated Savings:  $7,962,500" in out
    handle(dashboard, "optimal")
    assert "$7,043,750" in capsys.readouterr().out


def test_run_without_selection(dashboard, capsys):
    handle(dashboard, "run")
    out = capsys.readouterr().out
    assert "Selected: none" in out
    assert "Estimated Savings:  $0" in out


def test_export(dashboard, tmp_path, capsys):
    path = tmp_path / "subset.json"
    handle(dashboard, f'export json "{path}"')
    assert "Exported 7 events" in capsys.readouterr().out
    assert path.exists()
    handle(dashboard, "filter year 1999")
    handle(dashboard, f'export csv "{tmp_path / "empty.csv"}"')
    assert "Nothing to export" in capsys.readouterr().out


def test_unknown_command(dashboard, capsys):
    handle(dashboard, "frobnicate")
    assert "Unknown command" in capsys.readouterr().out


def test_main_repl(sample_csv_path, monkeypatch, capsys):
    _feed(monkeypatch, ["filter year 2023", "stats", "select scenario9", "quit"])
    assert main(["--data", str(sample_csv_path)]) == 0
    out = capsys.readouterr().out
    assert "Loaded 7 events (3 rows excluded)" in out
    assert "Weather Events: 2" in out
    assert "Error:" in out  # unknown scenario reported, REPL keeps going


def test_main_missing_data(tmp_path, capsys):
    assert main(["--data", str(tmp_path / "missing.csv")]) == 1
    assert "Error:" in capsys.readouterr().out


def test_main_bad_config(sample_csv_path, tmp_path, capsys):
    cfg = tmp_path / "cfg.json"
    cfg.write_text("{broken", encoding="utf-8")
    assert main(["--data", str(sample_csv_path), "--config", str(cfg)]) == 1


@pytest.mark.parametrize("line", ["events 0", "events -3"])
def test_events_count_must_be_positive(dashboard, line):
    with pytest.raises(ValueError):
        handle(dashboard, line)


def test_main_bad_config_value(sample_csv_path, tmp_path, capsys):
    cfg = tmp_path / "cfg.json"
    cfg.write_text('{"top_installations": "ten"}', encoding="utf-8")
    assert main(["--data", str(sample_csv_path), "--config", str(cfg)]) == 1
    assert "Error:" in capsys.readouterr().out


def test_main_corrupt_workbook(tmp_path, capsys):
    path = tmp_path / "broken.xlsx"
    path.write_text("not a workbook", encoding="utf-8")
    assert main(["--data", str(path)]) == 1
    assert "Error:" in capsys.readouterr().out
