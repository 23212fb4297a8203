"""ImageMagick-backed transcoder — shells out to the ``magick`` CLI."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from site_toolbox.codec.base import Transcoder
from site_toolbox.codec.profiles import EncodeProfile
from site_toolbox.core.datatypes import SourceImage
from site_toolbox.core.exceptions import (
    CodecInvocationError,
    SourceNotFoundError,
    ToolError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)


class MagickTranscoder(Transcoder):
    """Drive ImageMagick 7 through ``subprocess``.

    Args:
        binary: Name or path of the ``magick`` executable.
    """

    name = "magick"

    def __init__(self, binary: str | Path = "magick") -> None:
        self.binary = str(binary)

    def _run(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        cmd = [self.binary, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            return subprocess.run(cmd, check=True, capture_output=True, text=True)
        except FileNotFoundError as exc:
            msg = f"ImageMagick executable '{self.binary}' was not found"
            raise ToolError(msg) from exc

    def identify(self, path: Path) -> SourceImage:
        if not path.is_file():
            msg = f"Source image '{path}' does not exist"
            raise SourceNotFoundError(msg)

        try:
            proc = self._run(["identify", "-format", "%w %h %m", f"{path}[0]"])
        except subprocess.CalledProcessError as exc:
            msg = f"Source image '{path}' could not be identified: {exc.stderr.strip()}"
            raise UnsupportedFormatError(msg) from exc

        try:
            raw_width, raw_height, fmt = proc.stdout.split()[:3]
            width, height = int(raw_width), int(raw_height)
        except ValueError as exc:
            msg = f"Unexpected identify output for '{path}': {proc.stdout!r}"
            raise UnsupportedFormatError(msg) from exc

        if width <= 0 or height <= 0:
            msg = f"Source image '{path}' reports an invalid size {width}x{height}"
            raise UnsupportedFormatError(msg)

        return SourceImage(path=path, width=width, height=height, format=fmt.lower())

    def build_command(
        self,
        source: SourceImage,
        profile: EncodeProfile,
        width: int,
        output: Path,
        *,
        alpha: bool = False,
    ) -> list[str]:
        """Return the ``magick`` argument list (without the binary) for one rendition."""
        args = [str(source.path), "-strip"]
        if alpha:
            args += ["-alpha", "on"]
        args += ["-resize", f"{width}x"]
        if profile.quality is not None:
            args += ["-quality", str(profile.quality)]
        for define in profile.magick_defines:
            args += ["-define", define]
        args.append(str(output))
        return args

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
            self._run(self.build_command(source, profile, width, output, alpha=alpha))
        except subprocess.CalledProcessError as exc:
            msg = f"magick failed to encode {profile.name} at {width}px: {exc.stderr.strip()}"
            raise CodecInvocationError(msg, fmt=profile.name, width=width) from exc
        return output
