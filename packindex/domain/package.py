"""
Package domain objects for packindex.

PackageMetadata is the identifying part of a package's metadata document:
its id and version. The storage key of an entry is derived from it as
``{id}@{major_version}``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from ..exit_codes import FieldMissing, FieldTypeMismatch, InvalidVersion

ENTRY_SEPARATOR = "@"


def major_version(version: str) -> str:
    """
    Derive the major version from a dotted version string.

    Takes the first dot-delimited segment and removes every literal 'v'.

    >>> major_version("v1.2.3")
    '1'
    >>> major_version("vv3.0")
    '3'

    Raises:
        InvalidVersion: if nothing is left after stripping
    """
    major = version.split(".")[0].replace("v", "")
    if not major:
        raise InvalidVersion(version)
    return major


def _required_string(document: Mapping[str, Any], field: str) -> str:
    if field not in document:
        raise FieldMissing(field)
    value = document[field]
    if not isinstance(value, str):
        raise FieldTypeMismatch(field)
    return value


def entry_name(package_id: str, major: str) -> str:
    """Storage key of an entry."""
    return f"{package_id}{ENTRY_SEPARATOR}{major}"


def split_entry_name(name: str) -> Tuple[str, Optional[str]]:
    """
    Split an entry directory name into (id, major_version).

    Ids may themselves contain '@', so the split happens on the last one.
    Names without a separator return None as the major version.
    """
    package_id, sep, major = name.rpartition(ENTRY_SEPARATOR)
    if not sep:
        return name, None
    return package_id, major


@dataclass(frozen=True)
class PackageMetadata:
    """Identifying metadata of a package archive."""
    id: str
    version: str

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "PackageMetadata":
        """Validate the required fields of a parsed metadata document."""
        package_id = _required_string(document, "id")
        version = _required_string(document, "version")
        major_version(version)  # raises InvalidVersion
        return cls(id=package_id, version=version)

    @property
    def major_version(self) -> str:
        return major_version(self.version)

    @property
    def entry_name(self) -> str:
        return entry_name(self.id, self.major_version)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'version': self.version,
            'major_version': self.major_version,
            'entry': self.entry_name,
        }


def resolve_metadata(document: Mapping[str, Any]) -> Tuple[str, str]:
    """
    Resolve (id, major_version) from a parsed metadata document.

    Raises:
        FieldMissing: 'id' or 'version' is absent
        FieldTypeMismatch: 'id' or 'version' is not a string
        InvalidVersion: the version has an empty major component
    """
    metadata = PackageMetadata.from_document(document)
    return metadata.id, metadata.major_version
