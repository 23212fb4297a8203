"""Image codec backends used to probe sources and write renditions."""

from __future__ import annotations

from typing import Any

from site_toolbox.codec.base import Transcoder
from site_toolbox.codec.magick import MagickTranscoder
from site_toolbox.codec.pillow import PillowTranscoder
from site_toolbox.codec.profiles import AVIF, JPEG, WEBP, EncodeProfile
from site_toolbox.core.exceptions import ValidationError

BACKENDS: dict[str, type[Transcoder]] = {
    PillowTranscoder.name: PillowTranscoder,
    MagickTranscoder.name: MagickTranscoder,
}


def get_transcoder(name: str, **kwargs: Any) -> Transcoder:
    """Instantiate the codec backend registered under *name*.

    Raises:
        ValidationError: If *name* is not a known backend.
    """
    try:
        backend = BACKENDS[name]
    except KeyError:
        msg = f"Unknown codec '{name}'. Choose from: {sorted(BACKENDS)}"
        raise ValidationError(msg) from None
    return backend(**kwargs)


__all__ = [
    "AVIF",
    "BACKENDS",
    "JPEG",
    "WEBP",
    "EncodeProfile",
    "MagickTranscoder",
    "PillowTranscoder",
    "Transcoder",
    "get_transcoder",
]
