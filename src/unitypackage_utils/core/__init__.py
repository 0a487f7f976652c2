"""Core utilities for package manifests.

This package contains the manifest type definitions, schema validation and
per-asset metadata extraction used when exporting a package index as a
manifest.
"""

from .metadata import extract_metadata
from .types import Asset, AssetMetadata, Manifest
from .validator import validate_manifest, validate_manifest_with_error_details

__all__ = [
    "Asset",
    "AssetMetadata",
    "Manifest",
    "extract_metadata",
    "validate_manifest",
    "validate_manifest_with_error_details",
]
