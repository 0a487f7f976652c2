"""GUID-keyed asset resolution for .unitypackage entries.

A .unitypackage stores each asset under a directory named after its GUID:

    <guid>/pathname     UTF-8 asset path (e.g. "Assets/Anim/Walk.anim")
    <guid>/asset        raw asset payload
    <guid>/asset.meta   optional .meta text

This module groups those flat entries into an index of asset records with
path <-> GUID lookups, answers queries against it, and turns an index back
into archive entries.
"""

import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TypedDict

from .archive import ArchiveEntry
from .file_utils import bytes_to_string, string_to_bytes

PATHNAME_ENTRY = "pathname"
ASSET_ENTRY = "asset"
META_ENTRY = "asset.meta"

# Histogram key for asset paths without an extension
UNKNOWN_EXTENSION = "unknown"


@dataclass
class AssetRecord:
    """One logical asset of a package.

    Attributes:
        guid: Identifier used as the entry directory name
        asset_path: Project path of the asset
        asset_data: Raw asset payload
        meta_data: Text of the asset's .meta file, if the package carries one
    """

    guid: str
    asset_path: str
    asset_data: bytes
    meta_data: str | None = None


@dataclass
class PackageIndex:
    """Asset catalog of a package.

    ``guid_to_path`` and ``path_to_guid`` are exact inverses of each other and
    cover exactly the records in ``assets``.
    """

    assets: dict[str, AssetRecord] = field(default_factory=dict)
    guid_to_path: dict[str, str] = field(default_factory=dict)
    path_to_guid: dict[str, str] = field(default_factory=dict)


class PackageStats(TypedDict):
    """Aggregate figures for a package index."""

    total_assets: int
    total_size: int
    asset_types: dict[str, int]  # lowercase extension -> count


@dataclass
class _GuidGroup:
    pathname: ArchiveEntry | None = None
    asset: ArchiveEntry | None = None
    meta: ArchiveEntry | None = None


def normalize_entry_name(name: str) -> str:
    """Return an entry name with forward slashes and no leading ``./``."""
    normalized = name.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def _decode_asset_path(data: bytes) -> str:
    """Decode a ``pathname`` payload.

    Older exporters append a second line (``00``) after the path; only the
    first non-empty line is the asset path.
    """
    text = bytes_to_string(data).strip()
    return text.splitlines()[0].strip() if text else ""


def parse_unity_package(
    entries: Mapping[str, ArchiveEntry] | Iterable[ArchiveEntry],
) -> PackageIndex:
    """Build an asset index from the archive entries of a package.

    Groups lacking a ``pathname`` or an ``asset`` entry are not assets and are
    skipped. If two groups declare the same asset path, the later one wins.

    Args:
        entries: Mapping of name -> entry (as returned by the archive codec),
                 or any iterable of entries

    Returns:
        PackageIndex built from every complete GUID group
    """
    if isinstance(entries, Mapping):
        entries = entries.values()

    # Group entries by their GUID directory
    groups: dict[str, _GuidGroup] = {}

    for entry in entries:
        if entry.is_directory:
            continue

        parts = normalize_entry_name(entry.name).split("/")
        if len(parts) < 2 or not parts[0]:
            continue

        guid, file_name = parts[0], parts[1]
        group = groups.setdefault(guid, _GuidGroup())

        if file_name == ASSET_ENTRY:
            group.asset = entry
        elif file_name == META_ENTRY:
            group.meta = entry
        elif file_name == PATHNAME_ENTRY:
            group.pathname = entry

    index = PackageIndex()

    for guid, group in groups.items():
        if group.pathname is None or group.asset is None:
            continue

        asset_path = _decode_asset_path(group.pathname.data)
        if not asset_path:
            print(f"Warning: Skipping asset group {guid}: empty pathname", file=sys.stderr)
            continue

        meta_data = bytes_to_string(group.meta.data) if group.meta is not None else None

        # Last write wins: drop the GUID that previously owned this path
        displaced_guid = index.path_to_guid.get(asset_path)
        if displaced_guid is not None:
            del index.guid_to_path[displaced_guid]

        index.assets[asset_path] = AssetRecord(
            guid=guid,
            asset_path=asset_path,
            asset_data=group.asset.data,
            meta_data=meta_data,
        )
        index.guid_to_path[guid] = asset_path
        index.path_to_guid[asset_path] = guid

    return index


def get_guid_by_path(index: PackageIndex, asset_path: str) -> str | None:
    """Return the GUID for an asset path, or None if unknown."""
    return index.path_to_guid.get(asset_path)


def get_path_by_guid(index: PackageIndex, guid: str) -> str | None:
    """Return the asset path for a GUID, or None if unknown."""
    return index.guid_to_path.get(guid)


def has_asset(index: PackageIndex, asset_path: str) -> bool:
    """Check whether the index contains an asset at ``asset_path``."""
    return asset_path in index.assets


def find_assets_by_pattern(index: PackageIndex, pattern: str) -> list[AssetRecord]:
    """Find assets whose path contains ``pattern``.

    The match is a case-sensitive plain substring test, not a regex.

    Args:
        index: Package index to search
        pattern: Substring to look for

    Returns:
        Matching asset records in index order
    """
    return [asset for path, asset in index.assets.items() if pattern in path]


def rebuild_package_entries(index: PackageIndex) -> dict[str, ArchiveEntry]:
    """Turn an index back into archive entries.

    For every asset this emits ``<guid>/pathname`` and ``<guid>/asset``, plus
    ``<guid>/asset.meta`` when the record has meta text. Parsing the result
    yields an index equal to ``index``.

    Args:
        index: Package index to serialize

    Returns:
        Dictionary of entries keyed by entry name
    """
    entries: dict[str, ArchiveEntry] = {}

    for asset in index.assets.values():
        guid = asset.guid

        pathname_name = f"{guid}/{PATHNAME_ENTRY}"
        entries[pathname_name] = ArchiveEntry(
            name=pathname_name,
            data=string_to_bytes(asset.asset_path),
        )

        asset_name = f"{guid}/{ASSET_ENTRY}"
        entries[asset_name] = ArchiveEntry(name=asset_name, data=asset.asset_data)

        if asset.meta_data is not None:
            meta_name = f"{guid}/{META_ENTRY}"
            entries[meta_name] = ArchiveEntry(
                name=meta_name,
                data=string_to_bytes(asset.meta_data),
            )

    return entries


def list_assets(index: PackageIndex) -> list[str]:
    """Return the sorted asset paths of the index."""
    return sorted(index.assets.keys())


def get_extension(asset_path: str) -> str:
    """Return the lowercase text after the last ``.`` of a path, or ``unknown``."""
    _, dot, extension = asset_path.rpartition(".")
    if not dot or not extension:
        return UNKNOWN_EXTENSION
    return extension.lower()


def get_package_stats(index: PackageIndex) -> PackageStats:
    """Summarize an index.

    Returns:
        PackageStats with the asset count, the summed payload size in bytes and
        a count of assets per lowercase extension
    """
    total_size = 0
    asset_types: dict[str, int] = {}

    for asset in index.assets.values():
        total_size += len(asset.asset_data)

        extension = get_extension(asset.asset_path)
        asset_types[extension] = asset_types.get(extension, 0) + 1

    return PackageStats(
        total_assets=len(index.assets),
        total_size=total_size,
        asset_types=asset_types,
    )
