"""Shared fixtures: a Unity AnimationClip document and package builders."""

from collections.abc import Callable

import pytest

from unitypackage_utils.archive import ArchiveEntry, compress_tar_gz


SAMPLE_ANIMATION = """%YAML 1.1
%TAG !u! tag:unity3d.com,2011:
--- !u!74 &7400000
AnimationClip:
  m_ObjectHideFlags: 0
  m_CorrespondingSourceObject: {fileID: 0}
  m_PrefabInstance: {fileID: 0}
  m_PrefabAsset: {fileID: 0}
  m_Name: TestAnimation
  serializedVersion: 6
  m_Legacy: 0
  m_Compressed: 0
  m_UseHighQualityCurve: 1
  m_RotationCurves: []
  m_CompressedRotationCurves: []
  m_EulerCurves: []
  m_PositionCurves: []
  m_ScaleCurves: []
  m_FloatCurves:
  - serializedVersion: 2
    curve:
      serializedVersion: 2
      m_Curve:
      - serializedVersion: 3
        time: 0
        value: 0
        inSlope: 0
        outSlope: 0
        tangentMode: 0
        weightedMode: 0
        inWeight: 0.33333334
        outWeight: 0.33333334
      - serializedVersion: 3
        time: 1
        value: 1
        inSlope: 1
        outSlope: 1
        tangentMode: 0
        weightedMode: 0
        inWeight: 0.33333334
        outWeight: 0.33333334
      m_PreInfinity: 2
      m_PostInfinity: 2
      m_RotationOrder: 4
    attribute: m_LocalPosition.x
    path: GameObject
    classID: 137
    script: {fileID: 0}
    flags: 16
  - serializedVersion: 2
    curve:
      serializedVersion: 2
      m_Curve:
      - serializedVersion: 3
        time: 0
        value: 0
        inSlope: Infinity
        outSlope: -Infinity
        tangentMode: 65
        weightedMode: 0
        inWeight: 0.33333334
        outWeight: 0.33333334
      m_PreInfinity: 2
      m_PostInfinity: 2
      m_RotationOrder: 4
    attribute: m_LocalPosition.y
    path: GameObject
    classID: 137
    script: {fileID: 0}
    flags: 16
  m_PPtrCurves: []
  m_SampleRate: 60
  m_WrapMode: 0
  m_Bounds:
    m_Center: {x: 0, y: 0, z: 0}
    m_Extent: {x: 0, y: 0, z: 0}
  m_ClipBindingConstant:
    genericBindings:
    - serializedVersion: 2
      path: 2073732238
      attribute: 1
      script: {fileID: 0}
      typeID: 4
      customType: 0
      isPPtrCurve: 0
    pptrCurveMapping: []
  m_AnimationClipSettings:
    serializedVersion: 2
    m_StartTime: 0
    m_StopTime: 1
    m_LoopTime: 0
  m_EditorCurves: []
  m_EulerEditorCurves: []
  m_HasGenericRootTransform: 0
  m_HasMotionFloatCurves: 0
  m_Events: []
"""

SIMPLE_ANIMATION = """%YAML 1.1
%TAG !u! tag:unity3d.com,2011:
--- !u!74 &7400000
AnimationClip:
  m_ObjectHideFlags: 0
  m_Name: SimpleAnimation
  m_FloatCurves: []
  m_SampleRate: 60
"""

ANIM_GUID = "0a1b2c3d4e5f60718293a4b5c6d7e8f9"
TEXTURE_GUID = "ffeeddccbbaa99887766554433221100"
SCRIPT_GUID = "1234567890abcdef1234567890abcdef"

ANIM_PATH = "Assets/Animations/Walk.anim"
TEXTURE_PATH = "Assets/Textures/Hero.png"
SCRIPT_PATH = "Assets/Scripts/Player.cs"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


@pytest.fixture
def sample_animation() -> str:
    """AnimationClip with an x curve (2 keyframes) and a y curve (infinite slopes)."""
    return SAMPLE_ANIMATION


@pytest.fixture
def simple_animation() -> str:
    """AnimationClip without float curves."""
    return SIMPLE_ANIMATION


def build_entries(assets: list[tuple[str, str, bytes, str | None]]) -> dict[str, ArchiveEntry]:
    """Build package entries from (guid, path, payload, meta) tuples."""
    entries: dict[str, ArchiveEntry] = {}
    for guid, path, payload, meta in assets:
        entries[guid] = ArchiveEntry(name=guid, is_directory=True)
        entries[f"{guid}/pathname"] = ArchiveEntry(name=f"{guid}/pathname", data=path.encode("utf-8"))
        entries[f"{guid}/asset"] = ArchiveEntry(name=f"{guid}/asset", data=payload)
        if meta is not None:
            entries[f"{guid}/asset.meta"] = ArchiveEntry(
                name=f"{guid}/asset.meta", data=meta.encode("utf-8")
            )
    return entries


@pytest.fixture
def package_entries() -> dict[str, ArchiveEntry]:
    """Entries of a package holding an animation, a texture and a script."""
    return build_entries([
        (ANIM_GUID, ANIM_PATH, SAMPLE_ANIMATION.encode("utf-8"), f"fileFormatVersion: 2\nguid: {ANIM_GUID}\n"),
        (TEXTURE_GUID, TEXTURE_PATH, PNG_BYTES, f"fileFormatVersion: 2\nguid: {TEXTURE_GUID}\n"),
        (SCRIPT_GUID, SCRIPT_PATH, b"public class Player {}\n", None),
    ])


@pytest.fixture
def package_bytes(package_entries: dict[str, ArchiveEntry]) -> bytes:
    """Encoded .unitypackage bytes of ``package_entries``."""
    return compress_tar_gz(package_entries)


@pytest.fixture
def package_file(tmp_path, package_bytes: bytes):
    """The sample package written to a temporary .unitypackage file."""
    path = tmp_path / "Characters.unitypackage"
    path.write_bytes(package_bytes)
    return path


@pytest.fixture
def entries_factory() -> Callable[[list[tuple[str, str, bytes, str | None]]], dict[str, ArchiveEntry]]:
    """Factory for custom package entries."""
    return build_entries
