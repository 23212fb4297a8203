"""Encode profiles — format, quality, and encoder options per output type."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class EncodeProfile:
    """How one output format is encoded.

    Attributes:
        name: Short format key, also the ``Rendition.format`` value.
        ext: File extension without the dot.
        mime: MIME type used in ``<source type=...>``.
        pillow_format: Format name passed to ``Image.save``.
        quality: Encoder quality (1-100), ``None`` for lossless formats.
        options: Extra keyword arguments for ``Image.save``.
        magick_defines: ``-define`` values for the ImageMagick backend.
        keeps_alpha: Whether a transparent source keeps its alpha channel.
    """

    name: str
    ext: str
    mime: str
    pillow_format: str
    quality: int | None = None
    options: dict[str, Any] = field(default_factory=dict)
    magick_defines: tuple[str, ...] = ()
    keeps_alpha: bool = False

    def save_kwargs(self) -> dict[str, Any]:
        """Return the keyword arguments for ``PIL.Image.Image.save``."""
        kwargs: dict[str, Any] = {"format": self.pillow_format, **self.options}
        if self.quality is not None:
            kwargs["quality"] = self.quality
        return kwargs


AVIF = EncodeProfile(
    name="avif",
    ext="avif",
    mime="image/avif",
    pillow_format="AVIF",
    quality=60,
    options={"speed": 2},
    magick_defines=("heic:speed=2",),
    keeps_alpha=True,
)

WEBP = EncodeProfile(
    name="webp",
    ext="webp",
    mime="image/webp",
    pillow_format="WEBP",
    quality=80,
    options={"lossless": False},
    magick_defines=("webp:lossless=false",),
    keeps_alpha=True,
)

JPEG = EncodeProfile(
    name="jpeg",
    ext="jpg",
    mime="image/jpeg",
    pillow_format="JPEG",
    quality=85,
)
