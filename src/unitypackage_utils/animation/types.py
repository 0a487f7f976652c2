"""Type definitions for AnimationClip float curves."""

from dataclasses import astuple, dataclass, field
from enum import Enum

# Unity's default tangent weight (1/3 stored as a 32-bit float)
DEFAULT_TANGENT_WEIGHT = 0.33333334

# Keyframes within this many seconds of a requested time are considered a match
KEYFRAME_TIME_TOLERANCE = 0.001


@dataclass
class Keyframe:
    """One control point of a float curve.

    Slopes may be ``math.inf``/``-math.inf`` for stepped (constant) tangents.
    """

    time: float
    value: float
    in_slope: float = 0.0
    out_slope: float = 0.0
    tangent_mode: int = 0
    weighted_mode: int = 0
    in_weight: float = DEFAULT_TANGENT_WEIGHT
    out_weight: float = DEFAULT_TANGENT_WEIGHT


@dataclass
class FloatCurve:
    """A float property animated over time.

    Attributes:
        attribute: Animated property (e.g. ``m_LocalPosition.x``)
        path: Transform path of the animated object, relative to the animator
        keyframes: Keyframes ordered by ascending time
    """

    attribute: str
    path: str
    keyframes: list[Keyframe] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the curve within a clip."""
        return (self.attribute, self.path)

    def snapshot(self) -> tuple:
        """Return a hashable copy of the curve's full state."""
        return (self.attribute, self.path, tuple(astuple(keyframe) for keyframe in self.keyframes))


@dataclass
class CurveCompanions:
    """Fixed fields Unity writes alongside every float curve.

    Values are stored as the YAML text that is written out.
    """

    serialized_version: str = "2"
    curve_serialized_version: str = "2"
    keyframe_serialized_version: str = "3"
    pre_infinity: str = "2"
    post_infinity: str = "2"
    rotation_order: str = "4"
    class_id: str = "137"
    script: str = "{fileID: 0}"
    flags: str = "16"


class ClipState(Enum):
    """Lifecycle of an AnimationClipEditor."""

    EMPTY = "empty"
    LOADED = "loaded"
    DEGRADED = "degraded"  # header missing or YAML undecodable: name only, no curves
    EDITED = "edited"
    EXPORTED = "exported"
