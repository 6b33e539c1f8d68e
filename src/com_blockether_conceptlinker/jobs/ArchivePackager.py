"""
Packages a ProcessedOutput into a single downloadable zip archive.
"""

import io
import json
import logging
import zipfile

from com_blockether_conceptlinker.knowledge import MANIFEST_FILENAME, ProcessedOutput
from com_blockether_conceptlinker.utils.ConceptLinkerErrors import ArchivePackagingError

logger = logging.getLogger(__name__)


class ArchivePackager:
    """Writes every output file byte-for-byte plus a JSON manifest into a zip."""

    MANIFEST_FILENAME = MANIFEST_FILENAME

    @staticmethod
    def package(output: ProcessedOutput) -> bytes:
        """
        Create the archive.

        Args:
            output: Result of a pipeline run

        Returns:
            Zip archive bytes

        Raises:
            ArchivePackagingError: If two files share a name or a file collides with the manifest
        """
        names = [file.name for file in output.files] + [ArchivePackager.MANIFEST_FILENAME]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ArchivePackagingError(f"Duplicate file names in archive: {', '.join(duplicates)}")

        manifest = {
            "metadata": output.metadata.model_dump(by_alias=True),
            "concepts": [concept.model_dump(by_alias=True) for concept in output.concepts],
            "documentStatuses": [status.model_dump(mode="json", by_alias=True) for status in output.document_statuses],
        }

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for file in output.files:
                archive.writestr(file.name, file.content.encode("utf-8"))
            archive.writestr(ArchivePackager.MANIFEST_FILENAME, json.dumps(manifest, indent=2, ensure_ascii=False))

        data = buffer.getvalue()
        logger.info(f"Packaged {len(output.files)} files into archive ({len(data) / 1024:.1f} KB)")
        return data
