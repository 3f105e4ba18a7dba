"""
Unit tests for the DOCX report.
"""

import pytest

from wxdash.report import ReportConfig, format_currency, generate_docx_report


def test_format_currency():
    assert format_currency(1240000) == "$1,240,000"
    assert format_currency(0) == "$0"
    assert format_currency(-1500.4) == "-$1,500"


def test_generate_report(dashboard, tmp_path):
    docx = pytest.importorskip("docx")
    pytest.importorskip("matplotlib")
    dashboard.apply_optimal()
    out = tmp_path / "reports" / "damage.docx"
    cfg = ReportConfig(dropped_rows=3, command_log=["optimal"])
    assert generate_docx_report(dashboard, str(out), config=cfg) == str(out)
    assert out.exists()

    text = "\n".join(p.text for p in docx.Document(str(out)).paragraphs)
    assert "Weather Damage Report" in text
    assert "Total Damage Cost: $1,240,000" in text
    assert "Rows excluded at load (invalid cost or date): 3" in text
    assert "Hurricane/Tropical Storm account for 65% of total damage costs." in text
    assert ("Selected strategies: Enhanced stormwater infrastructure, Wind-resistant building upgrades, "
            "Wildfire prevention measures, Winter weather preparedness") in text
    assert "Estimated Savings: $7,043,750" in text


def test_report_empty_selection(dashboard, tmp_path):
    pytest.importorskip("docx")
    pytest.importorskip("matplotlib")
    dashboard.set_year(1999)
    with pytest.raises(ValueError):
        generate_docx_report(dashboard, str(tmp_path / "empty.docx"))
