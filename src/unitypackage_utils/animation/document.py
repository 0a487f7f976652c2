"""Text-level access to the AnimationClip block of a Unity YAML document.

Unity serializes an AnimationClip as one YAML document whose top-level key is
``AnimationClip:`` followed by indented fields. The helpers here locate that
block and individual fields inside it by offset, decode the block with
PyYAML, and render float curves in the exact layout Unity writes, so that
callers can splice new text into the original document without touching any
other byte.
"""

import json
import math
import re
from collections.abc import Hashable, Iterator
from dataclasses import dataclass
from typing import Any

import yaml

from .types import CurveCompanions, FloatCurve

CLIP_HEADER = "AnimationClip:"
NAME_KEY = "m_Name"
FLOAT_CURVES_KEY = "m_FloatCurves"

POSITIVE_INFINITY_TOKEN = "Infinity"
NEGATIVE_INFINITY_TOKEN = "-Infinity"
NAN_TOKEN = "NaN"

_HEADER_LINE = re.compile(r"^AnimationClip:[ \t]*\r?$", re.MULTILINE)
_NAME_LINE = re.compile(r"^[ \t]*m_Name:[ \t]*(.*?)[ \t]*\r?$", re.MULTILINE)
_FLOW_INDICATORS = set(",[]{}")


class ClipStructureError(ValueError):
    """Raised when a document does not have the expected AnimationClip shape."""


# Fields Unity always treats as strings, whatever they look like
TEXT_KEYS = frozenset({NAME_KEY, "attribute", "path"})

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class ClipLoader(yaml.SafeLoader):
    """SafeLoader tuned for Unity's YAML dialect.

    - Exponent floats without a dot (``1e-05``) load as floats.
    - Timestamps are not resolved; Unity never writes them.
    - Values of ``TEXT_KEYS`` load as their raw scalar text, so a clip named
      ``On`` or a path ``01`` is not turned into a bool or an int.
    """

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        self.flatten_mapping(node)
        mapping: dict[Any, Any] = {}

        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping", node.start_mark,
                    "found unhashable key", key_node.start_mark,
                )

            if key in TEXT_KEYS and isinstance(value_node, yaml.ScalarNode):
                mapping[key] = value_node.value
            else:
                mapping[key] = self.construct_object(value_node, deep=deep)

        return mapping


ClipLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

ClipLoader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(r"^[-+]?[0-9]+[eE][-+]?[0-9]+$"),
    list("-+0123456789"),
)


@dataclass(frozen=True)
class ClipBlock:
    """Offsets of the AnimationClip block.

    ``body_start``..``end`` covers the indented lines below the header line.
    Trailing blank lines are not part of the block.
    """

    header_start: int
    body_start: int
    end: int


@dataclass(frozen=True)
class FieldSpan:
    """Offsets of one top-level field inside the clip block."""

    start: int  # start of the key line
    value_start: int  # just after "key:"
    end: int  # end of the field's last line, newline included
    indent: str
    items: tuple[tuple[int, int], ...] = ()  # (start, end) of each block sequence item


def iter_lines(text: str, start: int = 0, end: int | None = None) -> Iterator[tuple[int, str]]:
    """Yield ``(offset, line)`` pairs, each line keeping its ``\\n``."""
    end = len(text) if end is None else end
    position = start
    while position < end:
        newline = text.find("\n", position, end)
        stop = end if newline == -1 else newline + 1
        yield position, text[position:stop]
        position = stop


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def _is_blank(line: str) -> bool:
    return not line.strip()


def detect_newline(text: str) -> str:
    """Return the newline style used by ``text``."""
    return "\r\n" if "\r\n" in text else "\n"


def locate_clip_block(text: str) -> ClipBlock | None:
    """Find the ``AnimationClip:`` block.

    The block runs from the header line to the first following line that is
    neither blank nor indented, or to the end of the text.

    Returns:
        ClipBlock, or None if there is no header line
    """
    match = _HEADER_LINE.search(text)
    if match is None:
        return None

    body_start = text.find("\n", match.start())
    body_start = len(text) if body_start == -1 else body_start + 1
    end = body_start

    for offset, line in iter_lines(text, body_start):
        if _is_blank(line):
            continue
        if _indent_width(line) == 0:
            break
        end = offset + len(line)

    return ClipBlock(header_start=match.start(), body_start=body_start, end=end)


def decode_clip_block(text: str, block: ClipBlock) -> dict[str, Any]:
    """Decode the block's fields with PyYAML.

    Raises:
        ClipStructureError: If the block does not decode to a mapping
        yaml.YAMLError: If the block is not valid YAML
    """
    parsed = yaml.load(text[block.body_start:block.end], Loader=ClipLoader)
    if not isinstance(parsed, dict):
        raise ClipStructureError("AnimationClip block is not a mapping")
    return parsed


def block_indent(text: str, block: ClipBlock) -> str:
    """Return the indentation of the block's fields (two spaces if empty)."""
    for _, line in iter_lines(text, block.body_start, block.end):
        if not _is_blank(line):
            return line[:_indent_width(line)]
    return "  "


def _is_sequence_item(line: str, indent: int) -> bool:
    rest = line[indent:]
    return rest.startswith("- ") or rest.rstrip("\r\n") == "-"


def locate_field(text: str, block: ClipBlock, key: str) -> FieldSpan | None:
    """Find a top-level field of the clip block.

    The field covers its key line and every following line that is indented
    deeper, or is a sequence item at the key's own indentation (Unity writes
    block sequences without extra indentation).

    Returns:
        FieldSpan, or None if the block has no such field
    """
    lines = list(iter_lines(text, block.body_start, block.end))
    field_indent: int | None = None

    for position, (offset, line) in enumerate(lines):
        if _is_blank(line):
            continue

        indent = _indent_width(line)
        if field_indent is None:
            field_indent = indent
        if indent != field_indent or not line[indent:].startswith(f"{key}:"):
            continue

        end = offset + len(line)
        items: list[list[int]] = []
        item_indent: int | None = None

        for next_offset, next_line in lines[position + 1:]:
            if _is_blank(next_line):
                continue

            next_indent = _indent_width(next_line)
            continues = next_indent > field_indent or (
                next_indent == field_indent and _is_sequence_item(next_line, next_indent)
            )
            if not continues:
                break

            if item_indent is None:
                item_indent = next_indent if _is_sequence_item(next_line, next_indent) else -1
            if next_indent == item_indent and _is_sequence_item(next_line, next_indent):
                items.append([next_offset, next_offset])

            end = next_offset + len(next_line)
            if items:
                items[-1][1] = end

        return FieldSpan(
            start=offset,
            value_start=offset + indent + len(key) + 1,
            end=end,
            indent=line[:indent],
            items=tuple((start, stop) for start, stop in items),
        )

    return None


def scan_name(text: str) -> str:
    """Best-effort ``m_Name`` lookup on raw text, without YAML decoding.

    One pair of surrounding quotes is removed; ``''`` inside a single-quoted
    name reads as ``'``.
    """
    match = _NAME_LINE.search(text)
    if not match:
        return ""

    name = match.group(1)
    if len(name) >= 2 and name[0] == name[-1] and name[0] in "'\"":
        inner = name[1:-1]
        return inner.replace("''", "'") if name[0] == "'" else inner
    return name


def format_number(value: Any) -> str:
    """Render a number the way Unity does.

    Integral values have no decimal point; infinities use Unity's
    ``Infinity``/``-Infinity`` tokens rather than YAML's ``.inf``.
    """
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)

    value = float(value)
    if math.isinf(value):
        return POSITIVE_INFINITY_TOKEN if value > 0 else NEGATIVE_INFINITY_TOKEN
    if math.isnan(value):
        return NAN_TOKEN
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_text(text: str, flow: bool = False) -> str:
    """Render a string scalar, quoting it only when a plain scalar would not
    read back as the same string."""
    if text == "":
        return ""

    if "\n" in text or "\r" in text:
        return json.dumps(text)

    plain = not (flow and _FLOW_INDICATORS.intersection(text))
    if plain:
        try:
            plain = yaml.load(f"k: {text}", Loader=ClipLoader) == {"k": text}
        except yaml.YAMLError:
            plain = False

    if plain:
        return text
    return "'" + text.replace("'", "''") + "'"


def format_scalar(value: Any, flow: bool = False) -> str:
    """Render a decoded YAML value back to inline text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return format_text(value, flow=flow)
    if isinstance(value, (bool, int, float)):
        return format_number(value)
    if isinstance(value, dict):
        pairs = ", ".join(f"{key}: {format_scalar(item, flow=True)}" for key, item in value.items())
        return "{" + pairs + "}"
    if isinstance(value, list):
        return "[" + ", ".join(format_scalar(item, flow=True) for item in value) + "]"
    return format_text(str(value), flow=flow)


def render_float_curve(
    curve: FloatCurve,
    companions: CurveCompanions,
    indent: str,
    newline: str,
) -> str:
    """Render one ``m_FloatCurves`` sequence item in Unity's layout."""
    lines = [
        f"- serializedVersion: {companions.serialized_version}",
        "  curve:",
        f"    serializedVersion: {companions.curve_serialized_version}",
    ]

    if curve.keyframes:
        lines.append("    m_Curve:")
        for keyframe in curve.keyframes:
            lines.extend([
                f"    - serializedVersion: {companions.keyframe_serialized_version}",
                f"      time: {format_number(keyframe.time)}",
                f"      value: {format_number(keyframe.value)}",
                f"      inSlope: {format_number(keyframe.in_slope)}",
                f"      outSlope: {format_number(keyframe.out_slope)}",
                f"      tangentMode: {format_number(keyframe.tangent_mode)}",
                f"      weightedMode: {format_number(keyframe.weighted_mode)}",
                f"      inWeight: {format_number(keyframe.in_weight)}",
                f"      outWeight: {format_number(keyframe.out_weight)}",
            ])
    else:
        lines.append("    m_Curve: []")

    lines.extend([
        f"    m_PreInfinity: {companions.pre_infinity}",
        f"    m_PostInfinity: {companions.post_infinity}",
        f"    m_RotationOrder: {companions.rotation_order}",
        f"  attribute: {format_text(curve.attribute)}".rstrip(),
        f"  path: {format_text(curve.path)}".rstrip(),
        f"  classID: {companions.class_id}",
        f"  script: {companions.script}",
        f"  flags: {companions.flags}",
    ])

    return "".join(f"{indent}{line}{newline}" for line in lines)
