"""AnimationClip float-curve editing.

This package reads the ``m_FloatCurves`` of a Unity .anim document into
plain dataclasses, edits them, and writes them back into the original text.
"""

from .document import ClipStructureError
from .editor import AnimationClipEditor, ClipExportError
from .types import (
    DEFAULT_TANGENT_WEIGHT,
    KEYFRAME_TIME_TOLERANCE,
    ClipState,
    FloatCurve,
    Keyframe,
)

__all__ = [
    "AnimationClipEditor",
    "ClipExportError",
    "ClipState",
    "ClipStructureError",
    "DEFAULT_TANGENT_WEIGHT",
    "FloatCurve",
    "KEYFRAME_TIME_TOLERANCE",
    "Keyframe",
]
