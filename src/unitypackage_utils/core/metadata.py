"""Metadata extraction for asset payloads.

Assets inside a package are only available as bytes, so extraction works on
in-memory payloads rather than files on disk.
"""

import io

from .types import AssetMetadata

# Optional: Audio metadata extraction
try:
    from mutagen import File as MutagenFile  # type: ignore[attr-defined]

    MUTAGEN_AVAILABLE = True
except ImportError:
    MUTAGEN_AVAILABLE = False
    MutagenFile = None


AUDIO_EXTENSIONS = {"wav", "mp3", "ogg", "flac", "m4a", "aac", "aif", "aiff"}


def extract_audio_metadata(asset_data: bytes) -> AssetMetadata:
    """Extract metadata from an audio payload using mutagen.

    Returns:
        Dictionary with audio metadata (duration, sample_rate, bitrate, channels).
        Empty if mutagen is not installed or cannot read the payload.
    """
    if not MUTAGEN_AVAILABLE:
        return AssetMetadata()

    try:
        audio = MutagenFile(io.BytesIO(asset_data))
    except Exception:
        # Unreadable audio is not fatal for a manifest
        return AssetMetadata()

    if audio is None:
        return AssetMetadata()

    metadata = AssetMetadata()

    if hasattr(audio.info, "length"):
        metadata["duration"] = f"{audio.info.length:.2f}s"  # type: ignore[typeddict-unknown-key]

    if hasattr(audio.info, "sample_rate"):
        metadata["sample_rate"] = str(audio.info.sample_rate)  # type: ignore[typeddict-unknown-key]

    if hasattr(audio.info, "bitrate"):
        metadata["bitrate"] = str(audio.info.bitrate)  # type: ignore[typeddict-unknown-key]

    if hasattr(audio.info, "channels"):
        metadata["channels"] = str(audio.info.channels)  # type: ignore[typeddict-unknown-key]

    return metadata


def extract_metadata(asset_data: bytes, file_type: str) -> AssetMetadata:
    """Extract metadata for an asset payload based on its type.

    Args:
        asset_data: Raw asset bytes
        file_type: File extension (lowercase)

    Returns:
        Dictionary with format-specific metadata
    """
    if file_type in AUDIO_EXTENSIONS:
        return extract_audio_metadata(asset_data)

    return AssetMetadata()
