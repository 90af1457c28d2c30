from datetime import datetime

import pytest

from llmsupport.report import (
    escape_markdown,
    generate_report,
    parse_stats,
    status_emoji,
    write_report,
)

WARN = "\u26a0\ufe0f"


def test_basic_report():
    output = write_report("Test Report", "success")
    assert "# Test Report" in output
    assert "\u2705 SUCCESS" in output
    assert "Generated:" in output
    assert "## Statistics" not in output


def test_report_with_stats():
    output = write_report(
        "Build Report", "partial", ["tests=50", "passed=48", "failed=2"]
    )
    assert f"{WARN} PARTIAL" in output
    assert "## Statistics" in output
    assert "| Metric | Value |" in output
    assert "| tests | 50 |" in output


def test_full_report_text():
    text = generate_report(
        "Build Report",
        "partial",
        {"tests": "50", "passed": "48"},
        now=datetime(2025, 1, 2, 3, 4, 5),
    )
    assert text == (
        "# Build Report\n\n"
        f"**Status:** {WARN} PARTIAL\n"
        "**Generated:** 2025-01-02 03:04:05\n\n"
        "## Statistics\n\n"
        "| Metric | Value |\n"
        "|--------|-------|\n"
        "| tests | 50 |\n"
        "| passed | 48 |\n\n"
        "---\n"
    )


def test_failed_report():
    assert "\u274c FAILED" in write_report("Failed Build", "failed")


def test_report_to_file(tmp_path):
    target = tmp_path / "report.md"
    message = write_report("File Report", "success", output=target)
    assert message.startswith("Report written to:")
    assert "# File Report" in target.read_text(encoding="utf-8")


def test_missing_title():
    with pytest.raises(ValueError, match="title is required"):
        write_report("", "success")


def test_missing_status():
    with pytest.raises(ValueError, match="status is required"):
        write_report("Test", "")


def test_invalid_status():
    with pytest.raises(ValueError, match="status must be: success, partial, or failed"):
        write_report("Test", "invalid")


@pytest.mark.parametrize("item", ["invalid", "=value", "key="])
def test_invalid_stats(item):
    with pytest.raises(ValueError, match="stat must be in KEY=VALUE format"):
        parse_stats([item])


def test_parse_stats_trims():
    assert parse_stats([" a = 1 ", "b=x=y"]) == {"a": "1", "b": "x=y"}


def test_markdown_escaping_in_report():
    output = write_report(
        "Test *bold* and _italic_", "success", ["value|with|pipes=100"]
    )
    assert "# Test \\*bold\\* and \\_italic\\_" in output
    assert "| value\\|with\\|pipes | 100 |" in output


@pytest.mark.parametrize(
    "status,expected",
    [("success", "\u2705"), ("partial", WARN), ("failed", "\u274c"), ("unknown", "\u2753")],
)
def test_status_emoji(status, expected):
    assert status_emoji(status) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("normal text", "normal text"),
        ("*bold*", "\\*bold\\*"),
        ("_italic_", "\\_italic\\_"),
        ("|pipe|", "\\|pipe\\|"),
        ("`code`", "\\`code\\`"),
        ("[link]", "\\[link\\]"),
    ],
)
def test_escape_markdown(text, expected):
    assert escape_markdown(text) == expected


def test_cannot_write_file():
    with pytest.raises(OSError, match="failed to write report"):
        write_report("Test", "success", output="/nonexistent/directory/report.md")