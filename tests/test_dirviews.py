import pytest

from llmsupport.dirviews import (
    IgnoreRules,
    directory_stats,
    format_size,
    list_directory,
    render_tree,
    summarize_directory,
)


@pytest.fixture
def sample(tmp_path):
    (tmp_path / "file1.txt").write_text("content")
    (tmp_path / "file2.go").write_text("package main")
    (tmp_path / "subdir").mkdir()
    (tmp_path / "subdir" / "nested.txt").write_text("nested")
    return tmp_path


def test_format_size_bytes():
    assert format_size(7) == "7 B"
    assert format_size(0) == "0 B"


def test_format_size_kilobytes():
    assert format_size(2048) == "2.0 KB"


def test_list_directory(sample):
    output = list_directory(sample)
    assert "[file] file1.txt" in output
    assert "[file] file2.go" in output
    assert "[dir] subdir" in output


def test_list_directory_sorted(sample):
    lines = list_directory(sample).splitlines()
    assert lines == ["[file] file1.txt", "[file] file2.go", "[dir] subdir"]


def test_list_directory_sizes(sample):
    output = list_directory(sample, sizes=True)
    assert "[file] file1.txt 7 B" in output


def test_list_directory_dates(sample):
    line = list_directory(sample, dates=True).splitlines()[0]
    assert line.startswith("[file] file1.txt ")
    assert len(line.split(" ")) == 4


def test_list_directory_missing():
    with pytest.raises(FileNotFoundError):
        list_directory("/nonexistent/path")


def test_list_directory_file(sample):
    with pytest.raises(NotADirectoryError):
        list_directory(sample / "file1.txt")


def test_list_directory_empty(tmp_path):
    assert list_directory(tmp_path, no_gitignore=True) == "EMPTY_DIRECTORY\n"


def test_list_directory_hidden(tmp_path):
    (tmp_path / ".secret").write_text("x")
    assert list_directory(tmp_path) == "EMPTY_DIRECTORY\n"
    assert ".secret" in list_directory(tmp_path, no_gitignore=True)


def test_list_directory_respects_gitignore(tmp_path):
    (tmp_path / ".gitignore").write_text("*.log\n")
    (tmp_path / "app.log").write_text("x")
    (tmp_path / "app.py").write_text("x")
    assert list_directory(tmp_path) == "[file] app.py\n"


def test_tree_basic(sample):
    output = render_tree(sample, no_gitignore=True)
    assert "file1.txt" in output
    assert "subdir/" in output
    assert output.splitlines()[0] == f"{sample}/"


def test_tree_directories_first(sample):
    lines = render_tree(sample, no_gitignore=True).splitlines()
    assert lines[1] == "├── subdir/"
    assert lines[2] == "│   └── nested.txt"
    assert lines[-1] == "└── file2.go"


def test_tree_sizes(sample):
    output = render_tree(sample, sizes=True, no_gitignore=True)
    assert "file1.txt [7 B]" in output


def test_tree_depth_limit(sample):
    output = render_tree(sample, depth=0, no_gitignore=True)
    assert "subdir/" in output
    assert "nested.txt" not in output
    assert "nested.txt" in render_tree(sample, depth=1, no_gitignore=True)


def test_tree_missing():
    with pytest.raises(FileNotFoundError):
        render_tree("/nonexistent/path")


def test_stats(sample):
    output = directory_stats(sample, no_gitignore=True)
    assert "FILES: 3" in output
    assert "DIRECTORIES: 1" in output
    assert "TOTAL_SIZE: 25 B" in output
    assert "  .txt: 2 files (13 B)" in output
    assert "  .go: 1 files (12 B)" in output


def test_stats_extension_order(sample):
    lines = directory_stats(sample, no_gitignore=True).splitlines()
    start = lines.index("BY_EXTENSION:")
    assert lines[start + 1].startswith("  .txt:")


def test_stats_missing():
    with pytest.raises(FileNotFoundError):
        directory_stats("/nonexistent/path")


@pytest.fixture
def project(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "README.md").write_text("# Project\n\nDescription here.")
    (tmp_path / "src" / "main.go").write_text("package main\n\nfunc main() {\n\t// code\n}")
    return tmp_path


def test_summarize_tree(project):
    output = summarize_directory(project, no_gitignore=True)
    assert "README.md" in output
    assert "  src/\n" in output
    assert "SUMMARY: 1 directories, 2 files" in output


def test_summarize_tree_not_recursive(project):
    output = summarize_directory(project, recursive=False, no_gitignore=True)
    assert "main.go" not in output
    assert "SUMMARY: 1 directories, 1 files" in output


def test_summarize_outline(project):
    output = summarize_directory(project, fmt="outline", no_gitignore=True)
    assert "--- README.md ---\n# Project\n\nDescription here.\n" in output
    assert "FORMAT: outline (first 10 lines per file)" in output


def test_summarize_outline_line_limit(project):
    output = summarize_directory(project, fmt="outline", max_lines=1, no_gitignore=True)
    assert "--- README.md ---\n# Project\n\n" in output
    assert "Description here." not in output


def test_summarize_full_truncates(tmp_path):
    (tmp_path / "a.txt").write_text("abcdefgh")
    output = summarize_directory(tmp_path, fmt="full", max_tokens=1, no_gitignore=True)
    assert "=== a.txt ===\nabcd\n... (truncated)\n" in output


def test_summarize_full_skips_binary(tmp_path):
    (tmp_path / "data.bin").write_bytes(b"\x00\x01\x02")
    (tmp_path / "note.txt").write_text("hello")
    output = summarize_directory(tmp_path, fmt="full", no_gitignore=True)
    assert "data.bin" not in output
    assert "=== note.txt ===\nhello\n" in output


def test_summarize_unknown_format(project):
    with pytest.raises(ValueError, match="unknown format"):
        summarize_directory(project, fmt="bogus")


def test_summarize_missing():
    with pytest.raises(FileNotFoundError):
        summarize_directory("/nonexistent/path")


def test_ignore_rules(tmp_path):
    (tmp_path / ".gitignore").write_text("# comment\n*.log\nbuild/\n!keep.log\n/top.txt\n")
    (tmp_path / "build").mkdir()
    (tmp_path / "sub").mkdir()
    rules = IgnoreRules.from_directory(tmp_path)
    assert rules.is_ignored(tmp_path / "debug.log") is True
    assert rules.is_ignored(tmp_path / "keep.log") is False
    assert rules.is_ignored(tmp_path / "build") is True
    assert rules.is_ignored(tmp_path / "build" / "out.o") is True
    assert rules.is_ignored(tmp_path / "top.txt") is True
    assert rules.is_ignored(tmp_path / "sub" / "top.txt") is False
    assert rules.is_ignored(tmp_path / "main.py") is False


def test_ignore_rules_without_file(tmp_path):
    rules = IgnoreRules.from_directory(tmp_path)
    assert rules.rules == ()
    assert rules.is_ignored(tmp_path / "anything.log") is False


def test_ignore_rules_double_star(tmp_path):
    (tmp_path / ".gitignore").write_text("docs/**/*.tmp\n")
    rules = IgnoreRules.from_directory(tmp_path)
    assert rules.is_ignored(tmp_path / "docs" / "a" / "b" / "x.tmp") is True
    assert rules.is_ignored(tmp_path / "docs" / "x.tmp") is True
    assert rules.is_ignored(tmp_path / "other" / "x.tmp") is False