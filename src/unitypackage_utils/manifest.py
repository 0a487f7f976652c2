"""Manifest generation for package indexes.

Converts a PackageIndex into a manifest with one entry per asset, in the
shape described by ``schemas/manifest.schema.json``.
"""

import uuid
from pathlib import PurePosixPath

from .core.metadata import extract_metadata
from .core.types import Asset, AssetMetadata, Manifest
from .resolver import AssetRecord, PackageIndex, get_extension

DEFAULT_SOURCE = "Unity Package"

# Maximum length for metadata strings (schema limit)
MAX_METADATA_STRING_LENGTH = 2048


def derive_local_tags(asset_path: str) -> list[str]:
    """Derive tags from the folder structure.

    Example:
        "Assets/Audio/Explosions/boom.wav" -> ["Assets", "Audio", "Explosions"]

    Args:
        asset_path: Project path of the asset

    Returns:
        List of tags derived from folder names (excludes the file name)
    """
    path_parts = PurePosixPath(asset_path).parts
    return list(path_parts[:-1]) if len(path_parts) > 1 else []


def build_asset_entry(record: AssetRecord) -> Asset:
    """Build the manifest entry for one package asset."""
    file_type = get_extension(record.asset_path)

    metadata = AssetMetadata()
    metadata["guid"] = record.guid  # type: ignore[typeddict-unknown-key]
    metadata["has_meta"] = "true" if record.meta_data is not None else "false"  # type: ignore[typeddict-unknown-key]
    metadata.update(extract_metadata(record.asset_data, file_type))

    # Truncate metadata strings if too long
    for key in list(metadata.keys()):
        value = metadata[key]  # type: ignore[literal-required]
        if len(value) > MAX_METADATA_STRING_LENGTH:
            metadata[key] = value[:MAX_METADATA_STRING_LENGTH]  # type: ignore[literal-required]

    return Asset(
        relative_path=record.asset_path,
        file_type=file_type,
        size_bytes=len(record.asset_data),
        metadata=metadata,
        local_tags=derive_local_tags(record.asset_path),
    )


def build_manifest(
    index: PackageIndex,
    pack_name: str,
    source: str = DEFAULT_SOURCE,
    global_tags: list[str] | None = None,
    license_link: str = "",
    root_path: str = "N/A",
) -> Manifest:
    """Generate a manifest for every asset of a package index.

    Args:
        index: Parsed package index
        pack_name: Human-readable name of the package
        source: Origin of the package (e.g., "Unity Asset Store")
        global_tags: Tags applicable to the entire package
        license_link: Optional URL or path to license documentation
        root_path: Location of the package file (schema requires non-empty)

    Returns:
        Manifest with assets sorted by path
    """
    assets = [build_asset_entry(index.assets[path]) for path in sorted(index.assets)]

    manifest: Manifest = {
        'pack_id': str(uuid.uuid4()),
        'pack_name': pack_name,
        'root_path': root_path or "N/A",
        'source': source,
        'license_link': license_link,
        'global_tags': list(global_tags or []),
        'assets': assets,
    }

    return manifest
