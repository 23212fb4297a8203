"""Transcoder ABC — the image codec the builder drives."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from site_toolbox.codec.profiles import EncodeProfile
from site_toolbox.core.datatypes import SourceImage


class Transcoder(ABC):
    """Black-box codec: probe a source, write resized re-encodes of it."""

    name: str

    @abstractmethod
    def identify(self, path: Path) -> SourceImage:
        """Probe *path* and return its dimensions and format.

        Raises:
            SourceNotFoundError: If *path* does not exist.
            UnsupportedFormatError: If the file cannot be decoded.
        """
        ...

    @abstractmethod
    def transcode(
        self,
        source: SourceImage,
        profile: EncodeProfile,
        width: int,
        output: Path,
        *,
        alpha: bool = False,
    ) -> Path:
        """Resize *source* to *width* (aspect preserved) and encode it to *output*.

        Metadata is stripped.  An existing *output* is overwritten.

        Args:
            source: The probed source image.
            profile: Target format and encoder settings.
            width: Output width in pixels.
            output: Destination file.
            alpha: Keep the alpha channel for lossy formats that support it.

        Returns:
            The path written.

        Raises:
            CodecInvocationError: If encoding fails.
        """
        ...
