"""
Loads documents from files on disk for command-line runs.
"""

import glob
import logging
import re
from pathlib import Path
from typing import List

from com_blockether_conceptlinker.utils.ConceptLinkerErrors import InvalidDocumentBatchError

from .ConceptLinkerTypes import Document

logger = logging.getLogger(__name__)

GLOB_MAGIC = re.compile(r"[*?\[]")


class DocumentLoader:
    """Reads files matching a glob pattern into documents named by their relative path."""

    @staticmethod
    def glob_root(pattern: str) -> Path:
        """
        Directory formed by the leading path components of the pattern without wildcards.

        A pattern without wildcards names a single file, so its parent is the root.
        """
        parts = Path(pattern).parts
        literal: List[str] = []
        for part in parts:
            if GLOB_MAGIC.search(part):
                break
            literal.append(part)
        else:
            literal = literal[:-1]
        return Path(*literal) if literal else Path(".")

    @classmethod
    def load(cls, pattern: str) -> List[Document]:
        """
        Read every file matching the pattern as UTF-8 text.

        Documents are named by their POSIX path relative to the pattern's root, so
        "meetings/**/*.md" yields "jan/notes.md" and "feb/notes.md" rather than two
        documents called "notes.md".

        Args:
            pattern: Glob pattern, "**" matches nested directories

        Returns:
            Documents in sorted path order

        Raises:
            InvalidDocumentBatchError: If a matching file is not valid UTF-8 text
        """
        root = cls.glob_root(pattern)
        paths = sorted(Path(p) for p in glob.glob(pattern, recursive=True) if Path(p).is_file())

        documents = []
        for path in paths:
            name = path.relative_to(root).as_posix()
            try:
                content = path.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                raise InvalidDocumentBatchError(f"File is not valid UTF-8 text: {path}") from e
            documents.append(Document(name=name, content=content))

        logger.info(f"📂 Loaded {len(documents)} files from '{pattern}'")
        return documents
