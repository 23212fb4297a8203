"""Shared value objects used across tools and codecs."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class SourceImage:
    """A probed source image with the names derived from its path."""

    path: Path
    width: int
    height: int
    format: str

    @property
    def basename(self) -> Path:
        """Return the source path without its extension."""
        return self.path.with_suffix("")

    @property
    def short_name(self) -> str:
        """Return the final path segment without its extension."""
        return self.path.stem


@dataclass(frozen=True)
class Rendition:
    """One encoded file written by the codec."""

    format: str
    width: int
    path: Path
    url: str


@dataclass(frozen=True)
class SrcsetEntry:
    """A candidate URL with its intrinsic width, as used in ``srcset``."""

    url: str
    width: int

    def render(self) -> str:
        """Return the ``"url 480w"`` form."""
        return f"{self.url} {self.width}w"


@dataclass(frozen=True)
class SizesEntry:
    """A display width, optionally guarded by a ``max-width`` media query."""

    width: int
    max_width: int | None = None

    def render(self) -> str:
        """Return ``"(max-width: 960px) 480px"``, or ``"480px"`` when unguarded."""
        if self.max_width is None:
            return f"{self.width}px"
        return f"(max-width: {self.max_width}px) {self.width}px"


@dataclass(frozen=True)
class ResponsiveSet:
    """Result of a responsive image set build."""

    source: SourceImage
    scale_percent: int
    renditions: tuple[Rendition, ...]
    fallback: Rendition
    avif_srcset: str
    webp_srcset: str
    sizes: str
    html: str
    widths: tuple[int, ...] = field(default_factory=tuple)
