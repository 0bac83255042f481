"""
Package archive reader for packindex.

Packages are zip archives carrying a JSON metadata document at a fixed
member name (``mod.json`` by default).
"""

import json
import logging
import zipfile
import zlib
from pathlib import Path
from typing import Any, Dict, Union

from ..exit_codes import ArchiveUnreadable, MetadataMissing, MetadataMalformed

logger = logging.getLogger(__name__)

DEFAULT_METADATA_FILENAME = "mod.json"


class ArchiveReader:
    """
    Reads the metadata document out of a package archive.

    Example:
        reader = ArchiveReader()
        document = reader.read_metadata("build/my.mod.geode")
        print(document["id"])
    """

    def __init__(self, metadata_filename: str = DEFAULT_METADATA_FILENAME):
        self.metadata_filename = metadata_filename

    def read_metadata(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Open a package archive and parse its metadata document.

        Args:
            path: Path to the package archive

        Returns:
            The metadata document as a dict

        Raises:
            ArchiveUnreadable: file missing, unreadable or not a zip archive
            MetadataMissing: no member named metadata_filename
            MetadataMalformed: member is not a UTF-8 JSON object
        """
        path = str(path)
        try:
            archive = zipfile.ZipFile(path)
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveUnreadable(path, str(e)) from e

        with archive:
            try:
                raw = archive.read(self.metadata_filename)
            except KeyError as e:
                raise MetadataMissing(path, self.metadata_filename) from e
            except (OSError, zipfile.BadZipFile, zlib.error) as e:
                raise ArchiveUnreadable(path, str(e)) from e

        logger.debug(f"Read {len(raw)} bytes of {self.metadata_filename} from {path}")

        try:
            document = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MetadataMalformed(self.metadata_filename, str(e)) from e

        if not isinstance(document, dict):
            raise MetadataMalformed(
                self.metadata_filename,
                f"expected an object, got {type(document).__name__}",
            )
        return document
