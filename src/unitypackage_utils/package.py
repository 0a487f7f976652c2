"""High-level interface for reading and writing .unitypackage files.

``UnityPackage`` ties the archive codec, the GUID resolver and the animation
editor together:

    raw bytes -> entries -> PackageIndex -> (edit asset) -> entries -> raw bytes

The index is never patched in place. Replacing an asset rebuilds the entries,
updates them and parses a fresh index.
"""

import io
import tarfile
import zlib
from pathlib import Path

from .animation import AnimationClipEditor
from .archive import ArchiveEntry, compress_tar_gz, extract_tar_gz, update_entry
from .file_utils import bytes_to_string, string_to_bytes
from .resolver import (
    ASSET_ENTRY,
    AssetRecord,
    PackageIndex,
    PackageStats,
    find_assets_by_pattern,
    get_package_stats,
    list_assets,
    parse_unity_package,
    rebuild_package_entries,
)

GZIP_MAGIC = b"\x1f\x8b"


def is_unity_package(data: bytes) -> bool:
    """Check whether ``data`` looks like a .unitypackage (a tar.gz stream).

    Only the gzip header and the first tar member are read.
    """
    if not data.startswith(GZIP_MAGIC):
        return False

    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            archive.next()
    except (tarfile.TarError, OSError, EOFError, zlib.error):
        return False
    return True


class UnityPackage:
    """A loaded .unitypackage.

    Example:
        >>> package = UnityPackage.from_file(Path("Characters.unitypackage"))
        >>> editor = package.open_animation("Assets/Anim/Walk.anim")
        >>> editor.set_name("Walk_Fast")
        >>> package.save_animation("Assets/Anim/Walk.anim", editor)
        >>> Path("Characters_edited.unitypackage").write_bytes(package.export())
    """

    def __init__(self, index: PackageIndex | None = None):
        self.index = index if index is not None else PackageIndex()

    @classmethod
    def from_bytes(cls, data: bytes) -> "UnityPackage":
        """Decode package bytes.

        Raises:
            ArchiveError: If the data is not a readable tar.gz stream
        """
        package = cls()
        package.load(data)
        return package

    @classmethod
    def from_file(cls, path: Path) -> "UnityPackage":
        """Read and decode a package file."""
        return cls.from_bytes(Path(path).read_bytes())

    def load(self, data: bytes) -> None:
        """Replace the package contents with the decoded ``data``."""
        self.index = parse_unity_package(extract_tar_gz(data))

    def get_files(self) -> list[str]:
        """Return the sorted asset paths."""
        return list_assets(self.index)

    def find(self, pattern: str) -> list[AssetRecord]:
        """Return assets whose path contains ``pattern``."""
        return find_assets_by_pattern(self.index, pattern)

    def stats(self) -> PackageStats:
        """Return asset count, total size and per-extension counts."""
        return get_package_stats(self.index)

    def get_asset(self, asset_path: str) -> AssetRecord:
        """Return the asset record at ``asset_path``.

        Raises:
            KeyError: If the package has no such asset
        """
        try:
            return self.index.assets[asset_path]
        except KeyError:
            raise KeyError(f"Asset {asset_path} not found in package") from None

    def read_text(self, asset_path: str) -> str:
        """Return an asset payload decoded as UTF-8."""
        return bytes_to_string(self.get_asset(asset_path).asset_data)

    def replace_asset(self, asset_path: str, data: bytes) -> None:
        """Replace an asset's payload.

        The index is re-derived from the updated entries, so records obtained
        earlier keep their old content.

        Raises:
            KeyError: If the package has no such asset
        """
        guid = self.get_asset(asset_path).guid

        entries: dict[str, ArchiveEntry] = rebuild_package_entries(self.index)
        update_entry(entries, f"{guid}/{ASSET_ENTRY}", data)
        self.index = parse_unity_package(entries)

    def open_animation(self, asset_path: str) -> AnimationClipEditor:
        """Load an .anim asset into an editor.

        Raises:
            KeyError: If the package has no such asset
        """
        return AnimationClipEditor(self.read_text(asset_path))

    def save_animation(self, asset_path: str, editor: AnimationClipEditor) -> None:
        """Write an editor's exported document back into the package."""
        self.replace_asset(asset_path, string_to_bytes(editor.export()))

    def export(self) -> bytes:
        """Encode the package as .unitypackage bytes.

        Raises:
            ArchiveError: If the archive cannot be written
        """
        return compress_tar_gz(rebuild_package_entries(self.index))
