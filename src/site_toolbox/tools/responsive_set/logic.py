"""Pure responsive image set logic — breakpoint widths, srcset/sizes, markup."""

from __future__ import annotations

import html
import logging
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import quote

from site_toolbox.codec import AVIF, JPEG, WEBP, EncodeProfile, PillowTranscoder, Transcoder
from site_toolbox.core.datatypes import Rendition, ResponsiveSet, SizesEntry, SourceImage, SrcsetEntry
from site_toolbox.core.events import EventBus
from site_toolbox.core.exceptions import CodecInvocationError, InvalidScaleError

logger = logging.getLogger(__name__)

# ── Constants ─────────────────────────────────────────────────────────────

BREAKPOINTS: tuple[int, ...] = (480, 960, 1920)

DEFAULT_URL_PREFIX = "/images/"

SET_PROFILES: tuple[EncodeProfile, ...] = (AVIF, WEBP)

FALLBACK_PROFILE: EncodeProfile = JPEG

PICTURE_TEMPLATE = """\
<picture>
   <source srcset="{avif_srcset}" sizes="{sizes}" type="{avif_mime}">
   <source srcset="{webp_srcset}" sizes="{sizes}" type="{webp_mime}">
   <img src="{img_src}" alt="{alt}">
</picture>"""

_TOOL = "responsive_set"


# ── Validation ────────────────────────────────────────────────────────────


def validate_scale(scale_percent: object) -> int:
    """Return *scale_percent* if it is a positive integer.

    Raises:
        InvalidScaleError: For non-integers, booleans, zero and negatives.
    """
    if isinstance(scale_percent, bool) or not isinstance(scale_percent, int):
        msg = f"Scale percent must be an integer, got {scale_percent!r}"
        raise InvalidScaleError(msg)
    if scale_percent <= 0:
        msg = f"Scale percent must be positive, got {scale_percent}"
        raise InvalidScaleError(msg)
    return scale_percent


# ── Width and naming ─────────────────────────────────────────────────────


def capped_width(breakpoint: int, intrinsic_width: int) -> int:
    """Return the breakpoint clamped to the source width (never upscale)."""
    return min(breakpoint, intrinsic_width)


def compute_rendition_widths(
    intrinsic_width: int,
    scale_percent: int = 100,
    breakpoints: Sequence[int] = BREAKPOINTS,
) -> list[int]:
    """Compute the output width for every breakpoint.

    Each width is ``min(breakpoint, intrinsic_width) * scale_percent // 100``,
    in breakpoint order.

    Args:
        intrinsic_width: Pixel width of the source image.
        scale_percent: Global scale applied after clamping.
        breakpoints: Ascending target widths.

    Returns:
        One width per breakpoint.
    """
    return [capped_width(bp, intrinsic_width) * scale_percent // 100 for bp in breakpoints]


def normalize_prefix(url_prefix: str) -> str:
    """Ensure the public URL prefix ends with a slash."""
    return url_prefix if url_prefix.endswith("/") else f"{url_prefix}/"


def public_url(short_name: str, ext: str, width: int | None = None, url_prefix: str = DEFAULT_URL_PREFIX) -> str:
    """Return the served URL of a rendition.

    ``/images/photo-480.avif`` for a sized rendition, ``/images/photo.jpg``
    when *width* is ``None``.
    """
    stem = short_name if width is None else f"{short_name}-{width}"
    return f"{normalize_prefix(url_prefix)}{quote(stem)}.{ext}"


def output_path(basename: Path, ext: str, width: int | None = None) -> Path:
    """Return the filesystem path of a rendition, next to the source."""
    stem = basename.name if width is None else f"{basename.name}-{width}"
    return basename.with_name(f"{stem}.{ext}")


# ── String assembly ──────────────────────────────────────────────────────


def format_srcset(entries: Sequence[SrcsetEntry], *, trailing_separator: bool = False) -> str:
    """Join srcset candidates with ``", "``.

    Args:
        entries: Candidates in breakpoint order.
        trailing_separator: Keep a dangling ``", "`` as older markup did.
    """
    joined = ", ".join(entry.render() for entry in entries)
    return f"{joined}, " if trailing_separator and entries else joined


def format_sizes(entries: Sequence[SizesEntry], fallback_width: int, *, legacy: bool = False) -> str:
    """Join the sizes entries and append the unguarded fallback.

    The default output lists every breakpoint followed by ``"{fallback}px"``.
    With *legacy* the last media-query entry is dropped and the fallback
    is a bare number, which is what previously generated pages contain.

    Args:
        entries: Media-query entries in breakpoint order.
        fallback_width: Width used when no media query matches.
        legacy: Reproduce the older trimming.
    """
    if legacy:
        guarded = entries[:-1] if len(entries) > 1 else entries
        return ", ".join([*(entry.render() for entry in guarded), str(fallback_width)])
    return ", ".join([*(entry.render() for entry in entries), SizesEntry(fallback_width).render()])


def render_picture(avif_srcset: str, webp_srcset: str, sizes: str, img_src: str, alt: str = "") -> str:
    """Render the ``<picture>`` fragment embedded in site pages."""
    return PICTURE_TEMPLATE.format(
        avif_srcset=avif_srcset,
        webp_srcset=webp_srcset,
        sizes=sizes,
        avif_mime=AVIF.mime,
        webp_mime=WEBP.mime,
        img_src=img_src,
        alt=html.escape(alt, quote=True),
    )


# ── Core build ───────────────────────────────────────────────────────────


def _log(event_bus: EventBus | None, message: str) -> None:
    logger.info(message)
    if event_bus is not None:
        event_bus.emit("log", tool=_TOOL, message=message)


def _encode(
    transcoder: Transcoder,
    source: SourceImage,
    profile: EncodeProfile,
    width: int,
    url_prefix: str,
    *,
    breakpoint: int | None,
) -> Rendition:
    """Encode one rendition, tagging codec failures with the breakpoint."""
    sized = breakpoint is not None
    target = output_path(source.basename, profile.ext, width if sized else None)
    try:
        written = transcoder.transcode(source, profile, width, target)
    except CodecInvocationError as exc:
        where = f"breakpoint {breakpoint}px" if sized else "fallback"
        msg = f"{profile.name} rendition failed at {where}: {exc}"
        raise CodecInvocationError(msg, fmt=profile.name, width=width, breakpoint=breakpoint) from exc
    return Rendition(
        format=profile.name,
        width=width,
        path=written,
        url=public_url(source.short_name, profile.ext, width if sized else None, url_prefix),
    )


def build_responsive_set(
    source_path: Path,
    scale_percent: int = 100,
    *,
    transcoder: Transcoder | None = None,
    url_prefix: str = DEFAULT_URL_PREFIX,
    alt: str = "",
    legacy_sizes: bool = False,
    event_bus: EventBus | None = None,
) -> ResponsiveSet:
    """Write AVIF/WebP renditions per breakpoint plus a JPEG fallback.

    Files land next to the source as ``{basename}-{width}.{ext}`` and
    ``{basename}.jpg``; URLs in the markup use *url_prefix* and the
    source's short name.  Existing files are overwritten.  A codec
    failure aborts the build and leaves already written files in place.

    Args:
        source_path: Image to convert.
        scale_percent: Positive percentage applied to every width.
        transcoder: Codec backend, ``PillowTranscoder`` if omitted.
        url_prefix: Public URL directory the renditions are served from.
        alt: Alternative text for the ``<img>`` element.
        legacy_sizes: Reproduce the older sizes/srcset trimming.
        event_bus: Optional event bus for log and progress events.

    Returns:
        A ``ResponsiveSet`` with the renditions, attribute strings and HTML.

    Raises:
        InvalidScaleError: If *scale_percent* is not a positive integer.
        SourceNotFoundError: If the source does not exist.
        UnsupportedFormatError: If the source cannot be identified.
        CodecInvocationError: If any rendition fails to encode.
    """
    scale_percent = validate_scale(scale_percent)
    codec = transcoder if transcoder is not None else PillowTranscoder()

    source = codec.identify(Path(source_path))
    _log(event_bus, f"{source.width}x{source.height}")
    _log(event_bus, str(source.basename))
    _log(event_bus, f"{source.width} {scale_percent}")

    widths = compute_rendition_widths(source.width, scale_percent)
    srcsets: dict[str, list[SrcsetEntry]] = {profile.name: [] for profile in SET_PROFILES}
    sizes: list[SizesEntry] = []
    renditions: list[Rendition] = []
    total = len(BREAKPOINTS)

    for idx, (breakpoint, width) in enumerate(zip(BREAKPOINTS, widths, strict=True)):
        _log(event_bus, f"doing {breakpoint} to {capped_width(breakpoint, source.width)} {scale_percent}% {width}")

        for profile in SET_PROFILES:
            rendition = _encode(codec, source, profile, width, url_prefix, breakpoint=breakpoint)
            renditions.append(rendition)
            srcsets[profile.name].append(SrcsetEntry(url=rendition.url, width=width))
            _log(event_bus, f"Generated {rendition.path}")

        sizes.append(SizesEntry(width=width, max_width=breakpoint))

        if event_bus is not None:
            event_bus.emit(
                "progress",
                tool=_TOOL,
                current=idx + 1,
                total=total,
                message=f"Breakpoint {breakpoint}px → {width}px",
            )

    last_width = widths[-1]
    fallback = _encode(codec, source, FALLBACK_PROFILE, last_width, url_prefix, breakpoint=None)
    _log(event_bus, f"Generated {fallback.path}")

    avif_srcset = format_srcset(srcsets[AVIF.name])
    webp_srcset = format_srcset(srcsets[WEBP.name], trailing_separator=legacy_sizes)
    sizes_attr = format_sizes(sizes, last_width, legacy=legacy_sizes)
    markup = render_picture(avif_srcset, webp_srcset, sizes_attr, fallback.url, alt=alt)

    if event_bus is not None:
        event_bus.emit(
            "completed",
            tool=_TOOL,
            message=f"Done — {len(renditions) + 1} files written for {source.short_name}",
        )

    return ResponsiveSet(
        source=source,
        scale_percent=scale_percent,
        renditions=tuple(renditions),
        fallback=fallback,
        avif_srcset=avif_srcset,
        webp_srcset=webp_srcset,
        sizes=sizes_attr,
        html=markup,
        widths=tuple(widths),
    )
