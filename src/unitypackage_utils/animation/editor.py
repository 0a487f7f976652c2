"""Editor for the float curves of a Unity AnimationClip (.anim) document.

Only ``m_Name`` and ``m_FloatCurves`` are modelled. Exporting writes those two
fields back into the original document text and leaves every other byte as
it was loaded, including formatting Unity relies on such as flow mappings
and ``Infinity`` slope tokens.
"""

import math
import re
import sys
from typing import Any

import yaml

from .document import (
    FLOAT_CURVES_KEY,
    NAME_KEY,
    NEGATIVE_INFINITY_TOKEN,
    POSITIVE_INFINITY_TOKEN,
    ClipBlock,
    ClipStructureError,
    block_indent,
    decode_clip_block,
    detect_newline,
    format_scalar,
    format_text,
    locate_clip_block,
    locate_field,
    render_float_curve,
    scan_name,
)
from .types import (
    DEFAULT_TANGENT_WEIGHT,
    KEYFRAME_TIME_TOLERANCE,
    ClipState,
    CurveCompanions,
    FloatCurve,
    Keyframe,
)

# Fallback patterns used when the clip block cannot be processed structurally
_FALLBACK_NAME = re.compile(r"m_Name:[ \t]*[^\r\n]*")
_FALLBACK_FLOAT_CURVES = re.compile(
    r"^([ \t]*)m_FloatCurves:.*?(?=^(?!\1[ \t]|\1-[ \t\r\n])|\Z)",
    re.MULTILINE | re.DOTALL,
)


class ClipExportError(RuntimeError):
    """Raised when neither export strategy can produce a document."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number(value: Any, default: float = 0) -> float:
    return value if _is_number(value) else default


def _slope(value: Any) -> float:
    """Decode a slope, accepting Unity's infinity tokens."""
    if _is_number(value):
        return value
    if value == POSITIVE_INFINITY_TOKEN:
        return math.inf
    if value == NEGATIVE_INFINITY_TOKEN:
        return -math.inf
    return 0


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _sequence(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


class AnimationClipEditor:
    """Load, edit and export the float curves of an AnimationClip.

    Loading never raises. A document without an ``AnimationClip:`` header
    loads as an empty clip; a block that does not decode falls back to a
    name-only view with no curves. Both set ``is_degraded``.

    Example:
        >>> editor = AnimationClipEditor(anim_text)
        >>> editor.set_name("Walk_Edited")
        >>> editor.remove_keyframe("m_LocalPosition.x", "Hips", 0.5)
        >>> new_text = editor.export()
    """

    def __init__(self, text: str | None = None):
        """Initialize the editor.

        Args:
            text: Optional .anim document to load immediately
        """
        self._original_text = ""
        self._name = ""
        self._curves: list[FloatCurve] = []
        self._companions: dict[tuple[str, str], CurveCompanions] = {}
        self._loaded_name = ""
        self._loaded_snapshots: list[tuple] = []
        self.state = ClipState.EMPTY
        self.is_degraded = False

        if text is not None:
            self.load(text)

    def load(self, text: str) -> None:
        """Load an .anim document, replacing any previous state.

        Args:
            text: Full YAML text of the document
        """
        self._original_text = text
        self._companions = {}

        block = locate_clip_block(text)

        if block is None:
            print("Warning: No AnimationClip header found, clip is empty", file=sys.stderr)
            self._degrade("")
        else:
            try:
                clip = decode_clip_block(text, block)
                self._name = _text(clip.get(NAME_KEY))
                self._curves = self._parse_float_curves(_sequence(clip.get(FLOAT_CURVES_KEY)))
                self.state = ClipState.LOADED
                self.is_degraded = False
            except (ClipStructureError, yaml.YAMLError, TypeError, AttributeError, ValueError) as e:
                print(f"Warning: Could not decode AnimationClip, reading name only: {e}", file=sys.stderr)
                self._degrade(scan_name(text))

        self._loaded_name = self._name
        self._loaded_snapshots = [curve.snapshot() for curve in self._curves]

    def _degrade(self, name: str) -> None:
        self._name = name
        self._curves = []
        self._companions = {}
        self.state = ClipState.DEGRADED
        self.is_degraded = True

    def _parse_float_curves(self, curves_data: list[Any]) -> list[FloatCurve]:
        """Convert decoded ``m_FloatCurves`` items into FloatCurve objects.

        Missing or non-numeric keyframe fields fall back to defaults instead of
        failing the load.
        """
        curves: list[FloatCurve] = []

        for item in curves_data:
            curve_data = _mapping(item)
            curve_body = _mapping(curve_data.get("curve"))
            keyframes_data = _sequence(curve_body.get("m_Curve"))

            keyframes = []
            for keyframe_item in keyframes_data:
                data = _mapping(keyframe_item)
                keyframes.append(Keyframe(
                    time=_number(data.get("time")),
                    value=_number(data.get("value")),
                    in_slope=_slope(data.get("inSlope")),
                    out_slope=_slope(data.get("outSlope")),
                    tangent_mode=_number(data.get("tangentMode")),
                    weighted_mode=_number(data.get("weightedMode")),
                    in_weight=_number(data.get("inWeight"), DEFAULT_TANGENT_WEIGHT),
                    out_weight=_number(data.get("outWeight"), DEFAULT_TANGENT_WEIGHT),
                ))

            curve = FloatCurve(
                attribute=_text(curve_data.get("attribute")),
                path=_text(curve_data.get("path")),
                keyframes=keyframes,
            )
            curves.append(curve)

            first_keyframe = _mapping(keyframes_data[0]) if keyframes_data else {}
            self._companions.setdefault(curve.key, self._read_companions(curve_data, curve_body, first_keyframe))

        return curves

    @staticmethod
    def _read_companions(
        curve_data: dict[str, Any],
        curve_body: dict[str, Any],
        first_keyframe: dict[str, Any],
    ) -> CurveCompanions:
        """Keep the fixed fields a curve was loaded with, for re-rendering it."""
        defaults = CurveCompanions()

        def pick(source: dict[str, Any], key: str, default: str) -> str:
            value = source.get(key)
            return default if value is None else format_scalar(value)

        return CurveCompanions(
            serialized_version=pick(curve_data, "serializedVersion", defaults.serialized_version),
            curve_serialized_version=pick(curve_body, "serializedVersion", defaults.curve_serialized_version),
            keyframe_serialized_version=pick(
                first_keyframe, "serializedVersion", defaults.keyframe_serialized_version
            ),
            pre_infinity=pick(curve_body, "m_PreInfinity", defaults.pre_infinity),
            post_infinity=pick(curve_body, "m_PostInfinity", defaults.post_infinity),
            rotation_order=pick(curve_body, "m_RotationOrder", defaults.rotation_order),
            class_id=pick(curve_data, "classID", defaults.class_id),
            script=pick(curve_data, "script", defaults.script),
            flags=pick(curve_data, "flags", defaults.flags),
        )

    def get_name(self) -> str:
        """Return the clip name."""
        return self._name

    def set_name(self, name: str) -> None:
        """Set the clip name (any string, including empty)."""
        self._name = name
        self.state = ClipState.EDITED

    def get_curves(self) -> list[FloatCurve]:
        """Return the live list of float curves.

        Modify curves through the editor methods rather than through the
        returned list.
        """
        return self._curves

    def get_curve(self, attribute: str, path: str) -> FloatCurve | None:
        """Return the first curve matching ``(attribute, path)``, or None."""
        for curve in self._curves:
            if curve.attribute == attribute and curve.path == path:
                return curve
        return None

    def add_curve(self, curve: FloatCurve) -> None:
        """Add a curve, or replace the keyframes of the curve with the same key.

        A replaced curve keeps its position in the curve order; a new curve is
        appended.
        """
        existing = self.get_curve(curve.attribute, curve.path)
        if existing is not None:
            existing.keyframes = list(curve.keyframes)
        else:
            self._curves.append(FloatCurve(curve.attribute, curve.path, list(curve.keyframes)))
        self.state = ClipState.EDITED

    def remove_curve(self, attribute: str, path: str) -> None:
        """Remove the curve matching ``(attribute, path)``; no-op if absent."""
        self._curves[:] = [
            curve for curve in self._curves
            if not (curve.attribute == attribute and curve.path == path)
        ]
        self.state = ClipState.EDITED

    def add_keyframe(self, attribute: str, path: str, keyframe: Keyframe) -> None:
        """Insert a keyframe, keeping the curve sorted by time.

        Keyframes with equal times keep their insertion order. No-op if the
        curve does not exist.
        """
        curve = self.get_curve(attribute, path)
        if curve is None:
            return

        curve.keyframes.append(keyframe)
        curve.keyframes.sort(key=lambda k: k.time)
        self.state = ClipState.EDITED

    def remove_keyframe(self, attribute: str, path: str, time: float) -> None:
        """Remove every keyframe within 0.001s of ``time``.

        No-op if the curve does not exist or no keyframe is that close.
        """
        curve = self.get_curve(attribute, path)
        if curve is None:
            return

        curve.keyframes[:] = [
            keyframe for keyframe in curve.keyframes
            if abs(keyframe.time - time) > KEYFRAME_TIME_TOLERANCE
        ]
        self.state = ClipState.EDITED

    def export(self) -> str:
        """Return the loaded document with the current name and curves.

        Only the ``m_Name`` line and the ``m_FloatCurves`` field change, and
        only when they were edited. Curves left untouched keep their original
        text. If the clip block cannot be processed, the two fields are
        substituted directly in the raw text instead.

        Raises:
            ClipExportError: If both strategies fail
        """
        try:
            result = self._export_structured()
        except (ClipStructureError, yaml.YAMLError, TypeError, AttributeError, ValueError) as e:
            print(f"Warning: Structured export failed, substituting fields in text: {e}", file=sys.stderr)
            try:
                result = self._export_fallback()
            except (TypeError, AttributeError, ValueError) as fallback_error:
                raise ClipExportError(
                    f"Could not export AnimationClip: {e}; fallback failed: {fallback_error}"
                ) from fallback_error

        self.state = ClipState.EXPORTED
        return result

    def _name_changed(self) -> bool:
        return self._name != self._loaded_name

    def _curves_changed(self) -> bool:
        return [curve.snapshot() for curve in self._curves] != self._loaded_snapshots

    def _export_structured(self) -> str:
        text = self._original_text
        block = locate_clip_block(text)
        if block is None:
            raise ClipStructureError("missing AnimationClip header")

        # The block must still decode before any of it is rewritten
        decode_clip_block(text, block)

        newline = detect_newline(text)
        replacements: list[tuple[int, int, str]] = []

        if self._name_changed():
            replacements.append(self._name_replacement(text, block, newline))

        if self._curves_changed():
            replacements.append(self._curves_replacement(text, block, newline))

        result = text
        for start, end, new_text in sorted(replacements, reverse=True):
            result = result[:start] + new_text + result[end:]
        return result

    def _name_replacement(self, text: str, block: ClipBlock, newline: str) -> tuple[int, int, str]:
        name_value = format_text(self._name)
        span = locate_field(text, block, NAME_KEY)

        if span is None:
            indent = block_indent(text, block)
            line = f"{indent}{NAME_KEY}: {name_value}".rstrip() + newline
            return (block.body_start, block.body_start, line)

        field_text = text[span.value_start:span.end]
        content_end = span.value_start + len(field_text.rstrip("\r\n"))
        return (span.value_start, content_end, f" {name_value}" if name_value else "")

    def _curves_replacement(self, text: str, block: ClipBlock, newline: str) -> tuple[int, int, str]:
        span = locate_field(text, block, FLOAT_CURVES_KEY)

        if span is None:
            field_text = self._render_curves_field(block_indent(text, block), None, [], newline)
            if block.end > block.body_start and not text[:block.end].endswith("\n"):
                field_text = newline + field_text.rstrip("\r\n")
            return (block.end, block.end, field_text)

        original_items = [text[start:end] for start, end in span.items]
        item_indent = None
        if original_items:
            first_item = original_items[0]
            item_indent = first_item[:len(first_item) - len(first_item.lstrip(" \t"))]

        field_text = self._render_curves_field(span.indent, item_indent, original_items, newline)
        if not text[:span.end].endswith("\n"):
            field_text = field_text.rstrip("\r\n")
        return (span.start, span.end, field_text)

    def _render_curves_field(
        self,
        indent: str,
        item_indent: str | None,
        original_items: list[str],
        newline: str,
    ) -> str:
        """Render the whole ``m_FloatCurves`` field.

        Curves whose state matches a loaded curve reuse that curve's original
        item text.
        """
        if not self._curves:
            return f"{indent}{FLOAT_CURVES_KEY}: []{newline}"

        reusable: dict[tuple, list[str]] = {}
        if len(original_items) == len(self._loaded_snapshots):
            for snapshot, item_text in zip(self._loaded_snapshots, original_items):
                if not item_text.endswith("\n"):
                    item_text += newline
                reusable.setdefault(snapshot, []).append(item_text)

        parts = [f"{indent}{FLOAT_CURVES_KEY}:{newline}"]
        for curve in self._curves:
            candidates = reusable.get(curve.snapshot())
            if candidates:
                parts.append(candidates.pop(0))
                continue

            companions = self._companions.get(curve.key, CurveCompanions())
            parts.append(render_float_curve(curve, companions, item_indent or indent, newline))

        return "".join(parts)

    def _export_fallback(self) -> str:
        result = self._original_text
        newline = detect_newline(result)

        if self._name_changed():
            name_line = f"{NAME_KEY}: {format_text(self._name)}".rstrip()
            result = _FALLBACK_NAME.sub(lambda _: name_line, result, count=1)

        if self._curves_changed():
            def replace_curves(match: "re.Match[str]") -> str:
                field_text = self._render_curves_field(match.group(1), None, [], newline)
                if not match.group(0).endswith("\n"):
                    field_text = field_text.rstrip("\r\n")
                return field_text

            result = _FALLBACK_FLOAT_CURVES.sub(replace_curves, result, count=1)

        return result
