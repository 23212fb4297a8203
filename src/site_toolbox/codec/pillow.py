"""Pillow-backed transcoder."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from site_toolbox.codec.base import Transcoder
from site_toolbox.codec.profiles import EncodeProfile
from site_toolbox.core.datatypes import SourceImage
from site_toolbox.core.exceptions import CodecInvocationError, SourceNotFoundError, UnsupportedFormatError

logger = logging.getLogger(__name__)

_ALPHA_MODES: frozenset[str] = frozenset({"RGBA", "LA", "PA", "RGBa", "La"})


def _has_alpha(img: Image.Image) -> bool:
    """Return ``True`` if *img* carries transparency."""
    return img.mode in _ALPHA_MODES or (img.mode == "P" and "transparency" in img.info)


def scaled_height(src_width: int, src_height: int, width: int) -> int:
    """Height matching *width* at the source aspect ratio, at least 1px."""
    return max(1, round(src_height * width / src_width))


class PillowTranscoder(Transcoder):
    """Encode renditions in-process with Pillow (AVIF needs Pillow >= 11.3)."""

    name = "pillow"

    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS) -> None:
        self.resample = resample
        self._cache: tuple[tuple[Path, int], Image.Image] | None = None

    def identify(self, path: Path) -> SourceImage:
        if not path.is_file():
            msg = f"Source image '{path}' does not exist"
            raise SourceNotFoundError(msg)

        try:
            with Image.open(path) as img:
                width, height = img.size
                fmt = (img.format or "").lower()
        except (UnidentifiedImageError, OSError) as exc:
            msg = f"Source image '{path}' could not be identified"
            raise UnsupportedFormatError(msg) from exc

        if width <= 0 or height <= 0:
            msg = f"Source image '{path}' reports an invalid size {width}x{height}"
            raise UnsupportedFormatError(msg)

        logger.debug("Identified %s as %s %dx%d", path, fmt, width, height)
        return SourceImage(path=path, width=width, height=height, format=fmt)

    def _decoded(self, source: SourceImage) -> Image.Image:
        """Return the decoded source, reusing the last decode if the file is unchanged."""
        key = (source.path, source.path.stat().st_mtime_ns)
        if self._cache is None or self._cache[0] != key:
            with Image.open(source.path) as img:
                img.load()
                self._cache = (key, img.copy())
        return self._cache[1]

    def transcode(
        self,
        source: SourceImage,
        profile: EncodeProfile,
        width: int,
        output: Path,
        *,
        alpha: bool = False,
    ) -> Path:
        if width < 1:
            msg = f"Cannot encode {profile.name} at width {width}"
            raise CodecInvocationError(msg, fmt=profile.name, width=width)

        try:
            img = self._decoded(source)
            keep_alpha = _has_alpha(img) and (alpha or profile.keeps_alpha)
            converted = img.convert("RGBA" if keep_alpha else "RGB")
            height = scaled_height(img.width, img.height, width)
            resized = converted.resize((width, height), resample=self.resample)
            # Nothing from the source's info (EXIF, ICC, XMP) is carried over.
            resized.info = {}
            output.parent.mkdir(parents=True, exist_ok=True)
            resized.save(output, **profile.save_kwargs())
        except Exception as exc:
            msg = f"Failed to encode {profile.name} at {width}px to '{output}': {exc}"
            raise CodecInvocationError(msg, fmt=profile.name, width=width) from exc

        logger.debug("Wrote %s (%dx%d)", output, width, height)
        return output
