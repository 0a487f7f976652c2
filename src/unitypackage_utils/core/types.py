"""Type definitions for package manifests.

These TypedDicts mirror the JSON schema in ``schemas/manifest.schema.json``.
"""

from typing import TypedDict


class AssetMetadata(TypedDict, total=False):
    """Flexible key-value pairs for asset-specific metadata.

    Examples: guid, has_meta, duration, sample_rate, channels.
    All values must be strings as per schema.
    """


class Asset(TypedDict):
    """One asset of a package."""

    relative_path: str  # Project path inside the package (e.g. "Assets/Anim/Walk.anim")
    file_type: str  # Lowercase extension, or "unknown"
    size_bytes: int  # Payload size in bytes
    metadata: AssetMetadata  # Asset-specific metadata
    local_tags: list[str]  # Tags derived from folder structure


class Manifest(TypedDict):
    """Complete manifest for a package."""

    pack_id: str  # UUID in lowercase hyphenated format
    pack_name: str  # Human-readable name
    root_path: str  # Package file the manifest was generated from
    source: str  # Origin (e.g., "Unity Asset Store")
    license_link: str  # URL or path to license documentation
    global_tags: list[str]  # Tags for the entire package
    assets: list[Asset]  # Individual assets
