"""unitypackage-utils - Unity package toolkit.

This package reads and writes Unity .unitypackage archives, resolves their
GUID-keyed entries into assets, edits the float curves of AnimationClip
documents without disturbing the rest of the file, and exports package
contents as JSON manifests for the asset tracker.
"""

# Package interface
from .package import UnityPackage, is_unity_package

# Archive codec
from .archive import (
    ArchiveEntry,
    ArchiveError,
    compress_tar_gz,
    extract_tar_gz,
    find_entries,
    list_entries,
    remove_entry,
    update_entry,
)

# GUID resolution
from .resolver import (
    AssetRecord,
    PackageIndex,
    PackageStats,
    find_assets_by_pattern,
    get_guid_by_path,
    get_package_stats,
    get_path_by_guid,
    has_asset,
    list_assets,
    parse_unity_package,
    rebuild_package_entries,
)

# Animation clips
from .animation import (
    AnimationClipEditor,
    ClipExportError,
    ClipState,
    FloatCurve,
    Keyframe,
)

# Manifests
from .core import Asset, AssetMetadata, Manifest, extract_metadata
from .core import validate_manifest, validate_manifest_with_error_details
from .manifest import build_manifest

# File helpers
from .file_utils import (
    bytes_to_string,
    data_url_to_bytes,
    extract_mime_type,
    format_file_size,
    get_mime_type_from_extension,
    string_to_bytes,
    validate_file_type,
)

# CLI
from .cli import generate_manifest, main

__version__ = "0.1.0"

__all__ = [
    # Package interface
    "UnityPackage",
    "is_unity_package",
    # Archive codec
    "ArchiveEntry",
    "ArchiveError",
    "compress_tar_gz",
    "extract_tar_gz",
    "find_entries",
    "list_entries",
    "remove_entry",
    "update_entry",
    # GUID resolution
    "AssetRecord",
    "PackageIndex",
    "PackageStats",
    "find_assets_by_pattern",
    "get_guid_by_path",
    "get_package_stats",
    "get_path_by_guid",
    "has_asset",
    "list_assets",
    "parse_unity_package",
    "rebuild_package_entries",
    # Animation clips
    "AnimationClipEditor",
    "ClipExportError",
    "ClipState",
    "FloatCurve",
    "Keyframe",
    # Manifests
    "Asset",
    "AssetMetadata",
    "Manifest",
    "build_manifest",
    "extract_metadata",
    "validate_manifest",
    "validate_manifest_with_error_details",
    # File helpers
    "bytes_to_string",
    "data_url_to_bytes",
    "extract_mime_type",
    "format_file_size",
    "get_mime_type_from_extension",
    "string_to_bytes",
    "validate_file_type",
    # CLI
    "generate_manifest",
    "main",
]
