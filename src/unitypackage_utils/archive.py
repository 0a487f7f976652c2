"""tar.gz archive codec for .unitypackage files.

A .unitypackage is a gzip-compressed tar stream. This module converts that
stream to and from a flat mapping of named entries and provides a few helpers
for editing the mapping in place. Everything that understands what the entries
mean lives in the resolver.
"""

import io
import tarfile
import zlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass


class ArchiveError(RuntimeError):
    """Raised when a tar.gz stream cannot be decoded or encoded."""


@dataclass
class ArchiveEntry:
    """One named blob inside a tar.gz archive.

    Attributes:
        name: Entry name as stored in the archive (e.g. ``"<guid>/asset"``)
        data: Raw payload bytes (empty for directories)
        is_directory: Whether the entry is a directory record
    """

    name: str
    data: bytes = b""
    is_directory: bool = False


def extract_tar_gz(compressed_data: bytes) -> dict[str, ArchiveEntry]:
    """Decode a tar.gz stream into its entries.

    Args:
        compressed_data: Raw bytes of the gzip-compressed tar archive

    Returns:
        Dictionary of entries keyed by entry name, in archive order

    Raises:
        ArchiveError: If the data is not a readable tar.gz stream
    """
    entries: dict[str, ArchiveEntry] = {}

    try:
        with tarfile.open(fileobj=io.BytesIO(compressed_data), mode="r:gz") as archive:
            for member in archive:
                data = b""
                if member.isfile():
                    handle = archive.extractfile(member)
                    if handle is not None:
                        data = handle.read()

                entries[member.name] = ArchiveEntry(
                    name=member.name,
                    data=data,
                    is_directory=member.isdir(),
                )
    except (tarfile.TarError, OSError, EOFError, zlib.error) as e:
        raise ArchiveError(f"tar.gz extraction failed: {e}") from e

    return entries


def compress_tar_gz(entries: Mapping[str, ArchiveEntry] | Iterable[ArchiveEntry]) -> bytes:
    """Encode entries into a tar.gz stream.

    Args:
        entries: Mapping of name -> entry, or any iterable of entries

    Returns:
        Bytes of the gzip-compressed tar archive

    Raises:
        ArchiveError: If the archive cannot be written
    """
    if isinstance(entries, Mapping):
        entries = entries.values()

    buffer = io.BytesIO()

    try:
        with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
            for entry in entries:
                info = tarfile.TarInfo(name=entry.name)
                if entry.is_directory:
                    info.type = tarfile.DIRTYPE
                    info.mode = 0o755
                    archive.addfile(info)
                    continue

                info.size = len(entry.data)
                info.mode = 0o644
                archive.addfile(info, io.BytesIO(entry.data))
    except (tarfile.TarError, OSError, ValueError) as e:
        raise ArchiveError(f"tar.gz compression failed: {e}") from e

    return buffer.getvalue()


def update_entry(entries: dict[str, ArchiveEntry], path: str, data: bytes) -> None:
    """Replace the payload of an entry, adding a file entry if it is missing.

    Args:
        entries: Entry mapping to modify
        path: Entry name
        data: New payload bytes
    """
    existing = entries.get(path)

    if existing is not None:
        existing.data = data
    else:
        entries[path] = ArchiveEntry(name=path, data=data, is_directory=False)


def remove_entry(entries: dict[str, ArchiveEntry], path: str) -> bool:
    """Remove an entry.

    Returns:
        True if the entry existed and was removed
    """
    return entries.pop(path, None) is not None


def find_entries(entries: Mapping[str, ArchiveEntry], pattern: str) -> list[ArchiveEntry]:
    """Return every entry whose name contains ``pattern`` (plain substring)."""
    return [entry for entry in entries.values() if pattern in entry.name]


def list_entries(entries: Mapping[str, ArchiveEntry]) -> list[str]:
    """Return the sorted entry names."""
    return sorted(entries.keys())
