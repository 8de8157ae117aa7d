"""Tests for the filesystem collaborator tools."""

from __future__ import annotations

from pathlib import Path

import pytest

from shellwright.paths import format_bytes
from shellwright.tool.builtin import (
    CreateDirTool,
    DeleteFileTool,
    EditFileTool,
    FileInfoTool,
    ListDirTool,
    MoveFileTool,
    SearchTool,
)


# ---------------------------------------------------------------------------
# file_edit
# ---------------------------------------------------------------------------


class TestEditFileTool:
    @pytest.mark.parametrize(
        "occurrence, expected, replacements",
        [
            (1, "X b a b a", 1),
            (2, "a b X b a", 1),
            (-1, "a b a b X", 1),
            (0, "X b X b X", 3),
        ],
    )
    async def test_occurrence(
        self, tmp_path: Path, occurrence: int, expected: str, replacements: int
    ) -> None:
        (tmp_path / "f.txt").write_text("a b a b a")
        tool = EditFileTool(cwd=str(tmp_path))
        result = await tool.run(
            {"path": "f.txt", "old_text": "a", "new_text": "X", "occurrence": occurrence}
        )
        assert not result.is_error
        assert result.data["replacements"] == replacements
        assert (tmp_path / "f.txt").read_text() == expected

    async def test_text_not_found(self, tmp_path: Path) -> None:
        (tmp_path / "f.txt").write_text("hello")
        result = await EditFileTool(cwd=str(tmp_path)).run(
            {"path": "f.txt", "old_text": "bye", "new_text": "x"}
        )
        assert result.data["code"] == "TEXT_NOT_FOUND"
        assert result.data["details"]["file_preview"] == "hello"

    async def test_occurrence_out_of_range(self, tmp_path: Path) -> None:
        (tmp_path / "f.txt").write_text("a a")
        result = await EditFileTool(cwd=str(tmp_path)).run(
            {"path": "f.txt", "old_text": "a", "new_text": "x", "occurrence": 3}
        )
        assert result.data["code"] == "TEXT_NOT_FOUND"
        assert (tmp_path / "f.txt").read_text() == "a a"

    async def test_missing_file(self, tmp_path: Path) -> None:
        result = await EditFileTool(cwd=str(tmp_path)).run(
            {"path": "nope.txt", "old_text": "a", "new_text": "b"}
        )
        assert result.data["code"] == "FILE_NOT_FOUND"

    async def test_empty_old_text_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "f.txt").write_text("a")
        result = await EditFileTool(cwd=str(tmp_path)).run(
            {"path": "f.txt", "old_text": "", "new_text": "b"}
        )
        assert result.data["code"] == "INVALID_PARAMS"


# ---------------------------------------------------------------------------
# file_delete / file_move
# ---------------------------------------------------------------------------


class TestDeleteAndMove:
    async def test_delete_file(self, tmp_path: Path) -> None:
        target = tmp_path / "f.txt"
        target.write_text("x")
        result = await DeleteFileTool(cwd=str(tmp_path)).run({"path": "f.txt"})
        assert result.data == {"deleted": True, "path": str(target), "was_directory": False}
        assert not target.exists()

    async def test_directory_needs_recursive(self, tmp_path: Path) -> None:
        (tmp_path / "d" / "sub").mkdir(parents=True)
        tool = DeleteFileTool(cwd=str(tmp_path))

        result = await tool.run({"path": "d"})
        assert result.data["code"] == "INVALID_ARGUMENT"
        assert (tmp_path / "d").exists()

        result = await tool.run({"path": "d", "recursive": True})
        assert result.data["was_directory"] is True
        assert not (tmp_path / "d").exists()

    async def test_delete_missing(self, tmp_path: Path) -> None:
        result = await DeleteFileTool(cwd=str(tmp_path)).run({"path": "nope"})
        assert result.data["code"] == "FILE_NOT_FOUND"

    async def test_move_creates_parents(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("x")
        result = await MoveFileTool(cwd=str(tmp_path)).run(
            {"source": "a.txt", "destination": "sub/dir/b.txt"}
        )
        assert result.data["overwritten"] is False
        assert (tmp_path / "sub" / "dir" / "b.txt").read_text() == "x"
        assert not (tmp_path / "a.txt").exists()

    async def test_move_refuses_existing_destination(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("new")
        (tmp_path / "b.txt").write_text("old")
        tool = MoveFileTool(cwd=str(tmp_path))

        result = await tool.run({"source": "a.txt", "destination": "b.txt"})
        assert result.data["code"] == "ALREADY_EXISTS"
        assert (tmp_path / "b.txt").read_text() == "old"

        result = await tool.run(
            {"source": "a.txt", "destination": "b.txt", "overwrite": True}
        )
        assert result.data["overwritten"] is True
        assert (tmp_path / "b.txt").read_text() == "new"

    async def test_move_missing_source(self, tmp_path: Path) -> None:
        result = await MoveFileTool(cwd=str(tmp_path)).run(
            {"source": "nope", "destination": "b"}
        )
        assert result.data["code"] == "FILE_NOT_FOUND"


# ---------------------------------------------------------------------------
# file_info
# ---------------------------------------------------------------------------


class TestFileInfoTool:
    async def test_text_file(self, tmp_path: Path) -> None:
        (tmp_path / ".notes").write_text("a\nb\nc")
        result = await FileInfoTool(cwd=str(tmp_path)).run({"path": ".notes"})
        data = result.data
        assert data["exists"] is True
        assert data["is_directory"] is False
        assert data["size_bytes"] == 5
        assert data["size_human"] == "5 B"
        assert data["line_count"] == 3
        assert data["hidden"] is True
        assert data["readonly"] is False

    async def test_directory(self, tmp_path: Path) -> None:
        result = await FileInfoTool(cwd=str(tmp_path)).run({"path": "."})
        assert result.data["is_directory"] is True
        assert result.data["line_count"] is None

    async def test_missing_is_not_an_error(self, tmp_path: Path) -> None:
        result = await FileInfoTool(cwd=str(tmp_path)).run({"path": "nope"})
        assert not result.is_error
        assert result.data["exists"] is False
        assert result.data["modified"] is None

    async def test_binary_has_no_line_count(self, tmp_path: Path) -> None:
        (tmp_path / "b.bin").write_bytes(b"\xff\xfe\x00")
        result = await FileInfoTool(cwd=str(tmp_path)).run({"path": "b.bin"})
        assert result.data["line_count"] is None


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 B"), (512, "512 B"), (1536, "1.5 KB"), (5 * 1024**3, "5 GB")],
)
def test_format_bytes(size: int, expected: str) -> None:
    assert format_bytes(size) == expected


# ---------------------------------------------------------------------------
# dir_list / dir_create
# ---------------------------------------------------------------------------


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    (tmp_path / "src" / "pkg").mkdir(parents=True)
    (tmp_path / "src" / "pkg" / "mod.py").write_text("import os\n")
    (tmp_path / "src" / "main.py").write_text("print('hi')\n")
    (tmp_path / "README.md").write_text("# Title\nimport nothing\n")
    (tmp_path / ".hidden").write_text("secret")
    return tmp_path


class TestListDirTool:
    async def test_direct_children_directories_first(self, tree: Path) -> None:
        result = await ListDirTool(cwd=str(tree)).run({})
        names = [item["name"] for item in result.data["items"]]
        assert names == ["src", "README.md"]
        assert result.data["items"][0]["type"] == "directory"
        assert result.data["truncated"] is False

    async def test_hidden(self, tree: Path) -> None:
        result = await ListDirTool(cwd=str(tree)).run({"include_hidden": True})
        assert ".hidden" in [item["name"] for item in result.data["items"]]

    async def test_depth_and_pattern(self, tree: Path) -> None:
        result = await ListDirTool(cwd=str(tree)).run({"depth": 3, "pattern": "*.PY"})
        names = sorted(item["name"] for item in result.data["items"])
        assert names == ["main.py", "mod.py"]

    async def test_not_a_directory(self, tree: Path) -> None:
        result = await ListDirTool(cwd=str(tree)).run({"path": "README.md"})
        assert result.data["code"] == "NOT_A_DIRECTORY"

    async def test_missing(self, tree: Path) -> None:
        result = await ListDirTool(cwd=str(tree)).run({"path": "nope"})
        assert result.data["code"] == "FILE_NOT_FOUND"


class TestCreateDirTool:
    async def test_create_and_exists(self, tmp_path: Path) -> None:
        tool = CreateDirTool(cwd=str(tmp_path))
        result = await tool.run({"path": "a/b/c"})
        assert result.data["created"] is True
        assert (tmp_path / "a" / "b" / "c").is_dir()

        result = await tool.run({"path": "a/b/c"})
        assert result.data == {
            "path": str(tmp_path / "a" / "b" / "c"),
            "created": False,
            "already_existed": True,
        }

    async def test_file_in_the_way(self, tmp_path: Path) -> None:
        (tmp_path / "f").write_text("x")
        result = await CreateDirTool(cwd=str(tmp_path)).run({"path": "f"})
        assert result.data["code"] == "NOT_A_DIRECTORY"


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------


class TestSearchTool:
    async def test_file_name_substring(self, tree: Path) -> None:
        result = await SearchTool(cwd=str(tree)).run({"pattern": "MAIN"})
        assert [r["name"] for r in result.data["results"]] == ["main.py"]
        assert result.data["truncated"] is False

    async def test_file_name_glob(self, tree: Path) -> None:
        result = await SearchTool(cwd=str(tree)).run({"pattern": "*.py"})
        assert sorted(r["name"] for r in result.data["results"]) == ["main.py", "mod.py"]

    async def test_content(self, tree: Path) -> None:
        result = await SearchTool(cwd=str(tree)).run(
            {"pattern": r"^import \w+", "type": "content", "file_pattern": "*.py"}
        )
        matches = result.data["results"]
        assert len(matches) == 1
        assert matches[0]["name"] == "mod.py"
        assert matches[0]["line"] == 1
        assert matches[0]["match"] == "import os"

    async def test_content_context(self, tmp_path: Path) -> None:
        (tmp_path / "f.txt").write_text("one\ntwo\nTARGET\nfour\nfive\nsix\n")
        result = await SearchTool(cwd=str(tmp_path)).run(
            {"pattern": "target", "type": "content"}
        )
        match = result.data["results"][0]
        assert match["line"] == 3
        assert match["context"] == "one\ntwo\nfour\nfive"

    async def test_max_results(self, tree: Path) -> None:
        result = await SearchTool(cwd=str(tree)).run(
            {"pattern": "import", "type": "content", "max_results": 1}
        )
        assert result.data["total_matches"] == 1
        assert result.data["truncated"] is True

    async def test_bad_regex(self, tree: Path) -> None:
        result = await SearchTool(cwd=str(tree)).run({"pattern": "(", "type": "content"})
        assert result.data["code"] == "INVALID_ARGUMENT"

    async def test_skips_binary_files(self, tmp_path: Path) -> None:
        (tmp_path / "blob.bin").write_bytes(b"needle\x00")
        result = await SearchTool(cwd=str(tmp_path)).run(
            {"pattern": "needle", "type": "content"}
        )
        assert result.data["results"] == []

    async def test_missing_root(self, tmp_path: Path) -> None:
        result = await SearchTool(cwd=str(tmp_path)).run({"pattern": "x", "path": "nope"})
        assert result.data["code"] == "FILE_NOT_FOUND"
