"""Tests for loading documents from disk."""

from pathlib import Path

import pytest

from com_blockether_conceptlinker.knowledge import DocumentLoader
from com_blockether_conceptlinker.utils import InvalidDocumentBatchError


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class TestDocumentLoader:
    """Test suite for DocumentLoader."""

    @pytest.mark.parametrize(
        "pattern, root",
        [
            ("meetings/**/*.md", Path("meetings")),
            ("notes/*.md", Path("notes")),
            ("*.md", Path(".")),
            ("notes/a.md", Path("notes")),
            ("/data/notes/[ab]*.md", Path("/data/notes")),
        ],
    )
    def test_glob_root(self, pattern: str, root: Path) -> None:
        assert DocumentLoader.glob_root(pattern) == root

    def test_same_named_files_in_different_folders_stay_distinct(self, tmp_path: Path) -> None:
        _write(tmp_path / "meetings" / "jan" / "notes.md", "January planning.")
        _write(tmp_path / "meetings" / "feb" / "notes.md", "February review.")

        documents = DocumentLoader.load(str(tmp_path / "meetings" / "**" / "*.md"))

        assert [document.name for document in documents] == ["feb/notes.md", "jan/notes.md"]
        assert [document.content for document in documents] == ["February review.", "January planning."]

    def test_flat_glob_uses_file_names(self, tmp_path: Path) -> None:
        _write(tmp_path / "b.md", "Bravo.")
        _write(tmp_path / "a.md", "Alpha.")
        _write(tmp_path / "skip.txt", "Not markdown.")

        documents = DocumentLoader.load(str(tmp_path / "*.md"))

        assert [document.name for document in documents] == ["a.md", "b.md"]

    def test_directories_are_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "folder.md").mkdir()
        _write(tmp_path / "note.md", "Text.")

        documents = DocumentLoader.load(str(tmp_path / "*.md"))

        assert [document.name for document in documents] == ["note.md"]

    def test_no_matches(self, tmp_path: Path) -> None:
        assert DocumentLoader.load(str(tmp_path / "*.md")) == []

    def test_non_utf8_file_is_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "image.md").write_bytes(b"\x89PNG\xff\xfe")

        with pytest.raises(InvalidDocumentBatchError, match="image.md"):
            DocumentLoader.load(str(tmp_path / "*.md"))
