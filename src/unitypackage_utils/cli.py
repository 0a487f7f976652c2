"""Command-line interface for unitypackage-utils.

This module provides the CLI entry point for inspecting .unitypackage files,
generating JSON manifests from them and editing animation clips inside them.
"""

import argparse
import json
import math
import sys
from pathlib import Path

from .animation import AnimationClipEditor, ClipExportError
from .archive import ArchiveError
from .core.types import Manifest
from .core.validator import validate_manifest_with_error_details
from .file_utils import format_file_size
from .manifest import DEFAULT_SOURCE, build_manifest
from .package import UnityPackage


def generate_manifest(
    package_path: Path,
    pack_name: str,
    source: str = DEFAULT_SOURCE,
    global_tags: list[str] | None = None,
    license_link: str | None = None,
) -> Manifest:
    """Generate a JSON manifest for a .unitypackage file.

    Args:
        package_path: Path to the package file
        pack_name: Human-readable name of the package
        source: Origin of the package (e.g., "Unity Asset Store")
        global_tags: Tags applicable to the entire package
        license_link: Optional URL or path to license documentation

    Returns:
        Dictionary conforming to the manifest JSON schema

    Raises:
        ArchiveError: If the package cannot be decoded
    """
    package_path_abs = package_path.resolve()

    print(f"Reading package: {package_path_abs}", file=sys.stderr)
    package = UnityPackage.from_file(package_path_abs)

    manifest = build_manifest(
        package.index,
        pack_name=pack_name,
        source=source,
        global_tags=global_tags or [],
        license_link=license_link or "",
        root_path=str(package_path_abs),
    )

    print(f"Found {len(manifest['assets'])} assets", file=sys.stderr)

    return manifest


def _format_value(value: float) -> str:
    if isinstance(value, float) and math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return f"{value:g}"


def cmd_list(args: argparse.Namespace) -> int:
    package = UnityPackage.from_file(Path(args.package))

    if args.json:
        listing = [
            {"path": path, "guid": package.index.path_to_guid[path]}
            for path in package.get_files()
        ]
        json.dump(listing, sys.stdout, indent=2)
        print()
        return 0

    for path in package.get_files():
        print(f"{package.index.path_to_guid[path]}  {path}")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    package = UnityPackage.from_file(Path(args.package))
    stats = package.stats()

    if args.json:
        json.dump(stats, sys.stdout, indent=2)
        print()
        return 0

    print(f"Assets: {stats['total_assets']}")
    print(f"Total size: {format_file_size(stats['total_size'])}")
    for extension, count in sorted(stats["asset_types"].items()):
        print(f"  {extension}: {count}")
    return 0


def cmd_find(args: argparse.Namespace) -> int:
    package = UnityPackage.from_file(Path(args.package))

    for record in package.find(args.pattern):
        print(record.asset_path)
    return 0


def cmd_manifest(args: argparse.Namespace) -> int:
    manifest = generate_manifest(
        Path(args.package),
        pack_name=args.name,
        source=args.source,
        global_tags=args.tags,
        license_link=args.license,
    )

    print("Validating manifest against schema...", file=sys.stderr)
    is_valid, error_msg = validate_manifest_with_error_details(manifest)

    if not is_valid:
        print("Error: Manifest validation failed:", file=sys.stderr)
        print(error_msg, file=sys.stderr)
        return 1

    print("Validation successful!", file=sys.stderr)

    json.dump(manifest, sys.stdout, indent=2)
    print()
    return 0


def cmd_curves(args: argparse.Namespace) -> int:
    package = UnityPackage.from_file(Path(args.package))
    editor: AnimationClipEditor = package.open_animation(args.asset)

    print(f"Clip: {editor.get_name()}")
    for curve in editor.get_curves():
        print(f"{curve.path or '<root>'} {curve.attribute} ({len(curve.keyframes)} keyframes)")
        for keyframe in curve.keyframes:
            print(
                f"  t={_format_value(keyframe.time)} v={_format_value(keyframe.value)} "
                f"in={_format_value(keyframe.in_slope)} out={_format_value(keyframe.out_slope)}"
            )
    return 0


def cmd_rename_clip(args: argparse.Namespace) -> int:
    package = UnityPackage.from_file(Path(args.package))
    editor = package.open_animation(args.asset)

    print(f"Renaming clip '{editor.get_name()}' to '{args.new_name}'", file=sys.stderr)
    editor.set_name(args.new_name)
    package.save_animation(args.asset, editor)

    output = Path(args.output)
    output.write_bytes(package.export())
    print(f"Wrote {output}", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="unitypackage-utils",
        description="Inspect and edit Unity .unitypackage files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List assets with their GUIDs
  unitypackage-utils list Characters.unitypackage

  # Manifest for the asset tracker
  unitypackage-utils manifest Characters.unitypackage --name "Characters" --tags 3d paid > out.json

  # Rename an animation clip
  unitypackage-utils rename-clip Characters.unitypackage Assets/Anim/Walk.anim Walk_Fast \\
      --output Characters_edited.unitypackage
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List asset paths and GUIDs")
    list_parser.add_argument("package", help="Path to the .unitypackage file")
    list_parser.add_argument("--json", action="store_true", help="Output JSON")
    list_parser.set_defaults(handler=cmd_list)

    stats_parser = subparsers.add_parser("stats", help="Show asset counts and sizes")
    stats_parser.add_argument("package", help="Path to the .unitypackage file")
    stats_parser.add_argument("--json", action="store_true", help="Output JSON")
    stats_parser.set_defaults(handler=cmd_stats)

    find_parser = subparsers.add_parser("find", help="Find assets whose path contains PATTERN")
    find_parser.add_argument("package", help="Path to the .unitypackage file")
    find_parser.add_argument("pattern", help="Case-sensitive substring")
    find_parser.set_defaults(handler=cmd_find)

    manifest_parser = subparsers.add_parser("manifest", help="Generate a JSON manifest")
    manifest_parser.add_argument("package", help="Path to the .unitypackage file")
    manifest_parser.add_argument("--name", required=True, help="Human-readable name of the package")
    manifest_parser.add_argument(
        "--source",
        default=DEFAULT_SOURCE,
        help='Source of the package (e.g., "Unity Asset Store")',
    )
    manifest_parser.add_argument(
        "--tags",
        nargs="+",
        default=[],
        help="Global tags for the package (space-separated)",
    )
    manifest_parser.add_argument("--license", help="URL or file path to license documentation")
    manifest_parser.set_defaults(handler=cmd_manifest)

    curves_parser = subparsers.add_parser("curves", help="Show the float curves of an .anim asset")
    curves_parser.add_argument("package", help="Path to the .unitypackage file")
    curves_parser.add_argument("asset", help="Asset path of the .anim file")
    curves_parser.set_defaults(handler=cmd_curves)

    rename_parser = subparsers.add_parser("rename-clip", help="Rename an animation clip")
    rename_parser.add_argument("package", help="Path to the .unitypackage file")
    rename_parser.add_argument("asset", help="Asset path of the .anim file")
    rename_parser.add_argument("new_name", help="New clip name")
    rename_parser.add_argument("--output", "-o", required=True, help="Output .unitypackage path")
    rename_parser.set_defaults(handler=cmd_rename_clip)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the command-line tool."""
    parser = build_parser()
    args = parser.parse_args(argv)

    package = Path(args.package)
    if not package.is_file():
        print(f"Error: Package does not exist: {package}", file=sys.stderr)
        sys.exit(1)

    try:
        exit_code = args.handler(args)
    except ArchiveError as e:
        print(f"Error: Failed to read package: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyError as e:
        print(f"Error: {e.args[0] if e.args else e}", file=sys.stderr)
        sys.exit(1)
    except ClipExportError as e:
        print(f"Error: Failed to export animation clip: {e}", file=sys.stderr)
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
