"""Tests for the UnityPackage facade."""

import gzip

import pytest

from unitypackage_utils.animation import FloatCurve, Keyframe
from unitypackage_utils.archive import ArchiveError, extract_tar_gz
from unitypackage_utils.package import UnityPackage, is_unity_package

ANIM_PATH = "Assets/Animations/Walk.anim"


@pytest.fixture
def package(package_bytes: bytes) -> UnityPackage:
    """The sample package, decoded."""
    return UnityPackage.from_bytes(package_bytes)


class TestIsUnityPackage:
    """Test package sniffing."""

    def test_recognizes_package(self, package_bytes: bytes) -> None:
        """Test that an encoded package is recognized."""
        assert is_unity_package(package_bytes) is True

    def test_rejects_other_data(self) -> None:
        """Test that non-gzip and gzip-but-not-tar data are rejected."""
        assert is_unity_package(b"PK\x03\x04 zip file") is False
        assert is_unity_package(b"") is False
        assert is_unity_package(gzip.compress(b"not a tar archive" * 64)) is False


class TestLoading:
    """Test reading packages."""

    def test_from_bytes(self, package: UnityPackage) -> None:
        """Test that all assets are indexed."""
        assert package.get_files() == [
            "Assets/Animations/Walk.anim",
            "Assets/Scripts/Player.cs",
            "Assets/Textures/Hero.png",
        ]

    def test_from_file(self, package_file) -> None:
        """Test reading a package from disk."""
        assert len(UnityPackage.from_file(package_file).get_files()) == 3

    def test_invalid_bytes_raise(self) -> None:
        """Test that undecodable data raises ArchiveError."""
        with pytest.raises(ArchiveError):
            UnityPackage.from_bytes(b"definitely not a package")

    def test_new_package_is_empty(self) -> None:
        """Test that a package without data has no assets."""
        package = UnityPackage()

        assert package.get_files() == []
        assert package.stats()["total_assets"] == 0


class TestQueries:
    """Test asset access."""

    def test_find(self, package: UnityPackage) -> None:
        """Test substring search over asset paths."""
        assert [record.asset_path for record in package.find(".cs")] == ["Assets/Scripts/Player.cs"]

    def test_stats(self, package: UnityPackage) -> None:
        """Test that stats delegate to the index."""
        assert package.stats()["asset_types"] == {"anim": 1, "png": 1, "cs": 1}

    def test_read_text(self, package: UnityPackage) -> None:
        """Test reading an asset as text."""
        assert package.read_text("Assets/Scripts/Player.cs") == "public class Player {}\n"

    def test_missing_asset_raises_key_error(self, package: UnityPackage) -> None:
        """Test that unknown paths raise KeyError."""
        with pytest.raises(KeyError, match="Assets/Missing.anim"):
            package.get_asset("Assets/Missing.anim")

        with pytest.raises(KeyError):
            package.replace_asset("Assets/Missing.anim", b"")


class TestEditing:
    """Test replacing assets and editing animations."""

    def test_replace_asset(self, package: UnityPackage) -> None:
        """Test that a replaced payload is visible and keeps its GUID."""
        guid = package.get_asset("Assets/Scripts/Player.cs").guid

        package.replace_asset("Assets/Scripts/Player.cs", b"public class Player : MonoBehaviour {}\n")

        record = package.get_asset("Assets/Scripts/Player.cs")
        assert record.guid == guid
        assert record.asset_data == b"public class Player : MonoBehaviour {}\n"
        assert package.index.path_to_guid["Assets/Scripts/Player.cs"] == guid

    def test_replace_asset_keeps_old_records(self, package: UnityPackage) -> None:
        """Test that previously obtained records are not mutated."""
        before = package.get_asset("Assets/Scripts/Player.cs")

        package.replace_asset("Assets/Scripts/Player.cs", b"changed")

        assert before.asset_data == b"public class Player {}\n"

    def test_replace_asset_keeps_meta(self, package: UnityPackage) -> None:
        """Test that meta text survives a payload replacement."""
        meta = package.get_asset("Assets/Textures/Hero.png").meta_data

        package.replace_asset("Assets/Textures/Hero.png", b"\x89PNG\r\n\x1a\nnew")

        assert package.get_asset("Assets/Textures/Hero.png").meta_data == meta

    def test_open_and_save_animation(self, package: UnityPackage) -> None:
        """Test editing a clip inside a package and exporting it."""
        editor = package.open_animation(ANIM_PATH)
        assert editor.get_name() == "TestAnimation"

        editor.set_name("Walk_Fast")
        editor.add_curve(FloatCurve("m_LocalPosition.z", "GameObject", [Keyframe(time=0, value=1)]))
        package.save_animation(ANIM_PATH, editor)

        reloaded = UnityPackage.from_bytes(package.export())
        clip = reloaded.open_animation(ANIM_PATH)
        assert clip.get_name() == "Walk_Fast"
        assert [c.attribute for c in clip.get_curves()] == [
            "m_LocalPosition.x",
            "m_LocalPosition.y",
            "m_LocalPosition.z",
        ]


class TestExport:
    """Test encoding packages."""

    def test_export_round_trip(self, package: UnityPackage) -> None:
        """Test that an exported package decodes to the same assets."""
        reloaded = UnityPackage.from_bytes(package.export())

        assert reloaded.get_files() == package.get_files()
        for path in package.get_files():
            original = package.get_asset(path)
            copy = reloaded.get_asset(path)
            assert copy.guid == original.guid
            assert copy.asset_data == original.asset_data
            assert copy.meta_data == original.meta_data

    def test_export_entry_layout(self, package: UnityPackage) -> None:
        """Test that exported entries follow the GUID directory layout."""
        guid = package.index.path_to_guid[ANIM_PATH]

        entries = extract_tar_gz(package.export())

        assert entries[f"{guid}/pathname"].data == ANIM_PATH.encode("utf-8")
        assert f"{guid}/asset" in entries
        assert f"{guid}/asset.meta" in entries
