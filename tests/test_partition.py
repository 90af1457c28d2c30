import json

import pytest

from llmsupport.partition import (
    Partition,
    build_conflict_graph,
    extract_file_deps,
    greedy_coloring,
    has_overlap,
    partition_directory,
)


def _write(directory, files):
    for name, text in files.items():
        (directory / name).write_text(text)
    return directory


def test_partition_with_shared_dependency(tmp_path):
    _write(
        tmp_path,
        {
            "story-1.md": "# Story 1\n\nModify `shared.ts` and `a.ts`",
            "story-2.md": "# Story 2\n\nModify `shared.ts` and `b.ts`",
            "story-3.md": "# Story 3\n\nModify `c.ts` (independent)",
        },
    )
    text = partition_directory(tmp_path).render_text()
    assert "Group" in text
    assert "Group 0: story-1.md, story-3.md\nGroup 1: story-2.md\n" in text


def test_partition_json(tmp_path):
    _write(
        tmp_path,
        {"story-1.md": "# Story 1\n\nModify `a.ts`", "story-2.md": "# Story 2\n\nModify `b.ts`"},
    )
    text = partition_directory(tmp_path).render_json()
    for key in ('"groups"', '"total_groups"', '"items_per_group"'):
        assert key in text
    data = json.loads(text)
    assert data["total_groups"] == 1
    assert data["items_per_group"] == [2]
    assert data["groups"] == [{"id": 0, "items": ["story-1.md", "story-2.md"]}]


def test_partition_independent(tmp_path):
    _write(
        tmp_path,
        {
            "story-1.md": "# Story 1\n\nModify `a.ts`",
            "story-2.md": "# Story 2\n\nModify `b.ts`",
            "story-3.md": "# Story 3\n\nModify `c.ts`",
        },
    )
    text = partition_directory(tmp_path).render_text()
    assert "All items are independent - can run in parallel" in text
    assert "Group 0: story-1.md, story-2.md, story-3.md" in text


def test_partition_tasks_sequential(tmp_path):
    _write(
        tmp_path,
        {"task-1.md": "# Task 1\n\nModify `shared.ts`", "task-2.md": "# Task 2\n\nModify `shared.ts`"},
    )
    text = partition_directory(tmp_path).render_text()
    assert "Group" in text
    assert "Maximum conflicts detected - items must run sequentially" in text
    assert "Group 0: task-1.md\nGroup 1: task-2.md\n" in text


def test_partition_empty(tmp_path):
    result = partition_directory(tmp_path)
    assert "No items found" in result.render_text()
    data = json.loads(result.render_json())
    assert data == {
        "groups": [],
        "items_per_group": [],
        "message": "No items found to partition",
        "total_groups": 0,
    }


def test_partition_conflicts_render(tmp_path):
    _write(
        tmp_path,
        {"story-1.md": "Modify `shared.ts`", "story-2.md": "Modify `shared.ts`", "story-3.md": "x"},
    )
    text = partition_directory(tmp_path).render_conflicts()
    assert "Conflict Graph" in text
    assert "  story-1.md conflicts with: story-2.md" in text
    assert "  story-3.md: no conflicts" in text


def test_partition_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError, match="directory not found"):
        partition_directory(tmp_path / "absent")


def test_partition_not_a_directory(tmp_path):
    target = tmp_path / "file.md"
    target.write_text("x")
    with pytest.raises(NotADirectoryError, match="not a directory"):
        partition_directory(target)


def test_greedy_coloring_triangle():
    graph = {"A": ["B", "C"], "B": ["A", "C"], "C": ["A", "B"], "D": []}
    colors = greedy_coloring(graph)
    assert len({colors["A"], colors["B"], colors["C"]}) == 3
    assert colors["D"] == 0


def test_build_conflict_graph():
    items = {
        "story-1.md": ["shared.ts", "a.ts"],
        "story-2.md": ["shared.ts", "b.ts"],
        "story-3.md": ["c.ts"],
    }
    conflicts = build_conflict_graph(items)
    assert "story-2.md" in conflicts["story-1.md"]
    assert "story-1.md" in conflicts["story-2.md"]
    assert conflicts["story-3.md"] == []


@pytest.mark.parametrize(
    ("a", "b", "overlap"),
    [
        (["a", "b"], ["b", "c"], True),
        (["a", "b"], ["c", "d"], False),
        ([], ["a"], False),
        (["a"], [], False),
        ([], [], False),
    ],
)
def test_has_overlap(a, b, overlap):
    assert has_overlap(a, b) is overlap


def test_extract_file_deps_sorted_unique():
    content = "Touch `b.go`, `a.ts` and `b.go` again; also `not a file.ts` and `plain`"
    assert extract_file_deps(content) == ["a.ts", "b.go"]


def test_single_item_partition():
    result = Partition.from_items({"only.md": ["x.ts"]})
    assert result.render_text() == (
        "All items are independent - can run in parallel\n\nGroup 0: only.md\n"
    )