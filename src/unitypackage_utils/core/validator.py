"""JSON Schema validation for package manifests.

The bundled schema is read once per process; manifests are checked against it
before they are written, and failures inside ``assets`` are reported with the
asset's path inside the package.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft7Validator, ValidationError
from jsonschema.exceptions import best_match

from .types import Manifest

# Bundled with the package: unitypackage_utils/schemas/manifest.schema.json
SCHEMA_PATH = Path(__file__).parent.parent / "schemas" / "manifest.schema.json"


def load_schema() -> dict[str, Any]:
    """Load the JSON schema from disk.

    Raises:
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema is invalid JSON
    """
    if not SCHEMA_PATH.exists():
        raise FileNotFoundError(f"Schema file not found: {SCHEMA_PATH}")

    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


@lru_cache(maxsize=1)
def _manifest_validator() -> Draft7Validator:
    schema = load_schema()
    Draft7Validator.check_schema(schema)
    return Draft7Validator(schema)


def validate_manifest(manifest: Manifest) -> None:
    """Validate a manifest against the JSON Schema.

    When several rules fail, the most relevant error is raised.

    Raises:
        ValidationError: If the manifest doesn't conform to the schema
        FileNotFoundError: If schema file is missing
        json.JSONDecodeError: If schema is invalid
    """
    error = best_match(_manifest_validator().iter_errors(manifest))
    if error is not None:
        raise error


def _asset_context(manifest: Manifest, error: ValidationError) -> str:
    path = list(error.absolute_path)
    if len(path) < 2 or path[0] != "assets" or not isinstance(path[1], int):
        return ""

    try:
        relative_path = manifest["assets"][path[1]]["relative_path"]
    except (KeyError, IndexError, TypeError):
        return ""
    return f" (asset {relative_path})"


def validate_manifest_with_error_details(manifest: Manifest) -> tuple[bool, str | None]:
    """Validate a manifest and return detailed error information.

    Args:
        manifest: The manifest dictionary to validate

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_manifest(manifest)
        return True, None
    except ValidationError as e:
        error_path = " -> ".join(str(p) for p in e.absolute_path) if e.absolute_path else "root"
        error_msg = f"Validation error at {error_path}{_asset_context(manifest, e)}: {e.message}"

        # Whole objects are already described by the message
        if not isinstance(e.instance, (dict, list)):
            error_msg += f"\nInvalid value: {e.instance!r}"

        return False, error_msg
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"
