"""Tests for responsive image set logic."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from site_toolbox.core.datatypes import ResponsiveSet, SizesEntry, SrcsetEntry
from site_toolbox.core.events import EventBus
from site_toolbox.core.exceptions import CodecInvocationError, InvalidScaleError, SourceNotFoundError
from site_toolbox.tools.responsive_set.logic import (
    BREAKPOINTS,
    build_responsive_set,
    compute_rendition_widths,
    format_sizes,
    format_srcset,
    output_path,
    public_url,
    render_picture,
    validate_scale,
)

AVIF_2000 = "/images/x-480.avif 480w, /images/x-960.avif 960w, /images/x-1920.avif 1920w"
WEBP_2000 = "/images/x-480.webp 480w, /images/x-960.webp 960w, /images/x-1920.webp 1920w"
SIZES_2000 = "(max-width: 480px) 480px, (max-width: 960px) 960px, (max-width: 1920px) 1920px, 1920px"


# ── TestComputeRenditionWidths ─────────────────────────────────────────────


class TestComputeRenditionWidths:
    """Tests for the ``compute_rendition_widths`` function."""

    def test_wide_source_uses_breakpoints(self) -> None:
        """A source wider than every breakpoint yields the breakpoints."""
        assert compute_rendition_widths(2000) == [480, 960, 1920]

    def test_narrow_source_is_never_upscaled(self) -> None:
        """Breakpoints above the source width are clamped to it."""
        assert compute_rendition_widths(800) == [480, 800, 800]

    def test_scale_applies_after_clamping(self) -> None:
        """W=800 at 50% gives [240, 400, 400]."""
        assert compute_rendition_widths(800, 50) == [240, 400, 400]

    def test_scale_truncates_toward_zero(self) -> None:
        """Fractional widths are truncated, not rounded."""
        assert compute_rendition_widths(2000, 33) == [158, 316, 633]

    def test_scale_above_hundred(self) -> None:
        """Scales over 100% enlarge every width."""
        assert compute_rendition_widths(2000, 150) == [720, 1440, 2880]

    def test_widths_are_non_decreasing(self) -> None:
        """Ascending breakpoints give non-decreasing widths for any source."""
        for width in (1, 300, 480, 961, 5000):
            widths = compute_rendition_widths(width, 75)
            assert widths == sorted(widths)

    def test_custom_breakpoints(self) -> None:
        """An explicit breakpoint sequence replaces the default."""
        assert compute_rendition_widths(1000, 100, breakpoints=(320, 640)) == [320, 640]

    def test_default_breakpoints(self) -> None:
        """The fixed breakpoint set is 480, 960 and 1920."""
        assert BREAKPOINTS == (480, 960, 1920)


# ── TestValidateScale ──────────────────────────────────────────────────────


class TestValidateScale:
    """Tests for the ``validate_scale`` function."""

    @pytest.mark.parametrize("value", [0, -1, -100])
    def test_non_positive_raises(self, value: int) -> None:
        """Zero and negative scales are rejected."""
        with pytest.raises(InvalidScaleError, match="must be positive"):
            validate_scale(value)

    @pytest.mark.parametrize("value", [50.0, "100", True, None])
    def test_non_integer_raises(self, value: Any) -> None:
        """Floats, strings, booleans and ``None`` are rejected."""
        with pytest.raises(InvalidScaleError, match="must be an integer"):
            validate_scale(value)

    def test_positive_is_returned(self) -> None:
        """A positive integer passes through unchanged."""
        assert validate_scale(100) == 100


# ── TestNaming ─────────────────────────────────────────────────────────────


class TestNaming:
    """Tests for ``public_url`` and ``output_path``."""

    def test_sized_url(self) -> None:
        """Sized renditions carry a width suffix under the prefix."""
        assert public_url("x", "avif", 480) == "/images/x-480.avif"

    def test_fallback_url_has_no_suffix(self) -> None:
        """The fallback URL has no width suffix."""
        assert public_url("x", "jpg") == "/images/x.jpg"

    def test_prefix_gets_trailing_slash(self) -> None:
        """A prefix without a trailing slash is normalised."""
        assert public_url("x", "webp", 960, url_prefix="/static/img") == "/static/img/x-960.webp"

    def test_url_quotes_unsafe_characters(self) -> None:
        """Spaces in the short name are percent-encoded."""
        assert public_url("my photo", "jpg") == "/images/my%20photo.jpg"

    def test_output_path_next_to_source(self, tmp_path: Path) -> None:
        """Renditions are written beside the source, suffixed by width."""
        basename = tmp_path / "x"
        assert output_path(basename, "webp", 480) == tmp_path / "x-480.webp"
        assert output_path(basename, "jpg") == tmp_path / "x.jpg"


# ── TestStringAssembly ─────────────────────────────────────────────────────


class TestStringAssembly:
    """Tests for ``format_srcset``, ``format_sizes`` and ``render_picture``."""

    def test_srcset_joins_entries(self) -> None:
        """Entries are joined with comma-space and no trailing separator."""
        entries = [SrcsetEntry("/images/x-480.avif", 480), SrcsetEntry("/images/x-960.avif", 960)]
        assert format_srcset(entries) == "/images/x-480.avif 480w, /images/x-960.avif 960w"

    def test_srcset_trailing_separator(self) -> None:
        """The legacy form keeps a dangling separator."""
        entries = [SrcsetEntry("/images/x-480.webp", 480)]
        assert format_srcset(entries, trailing_separator=True) == "/images/x-480.webp 480w, "

    def test_sizes_keeps_every_breakpoint_and_fallback(self) -> None:
        """Every media-query entry is kept and the fallback is unguarded."""
        entries = [SizesEntry(480, 480), SizesEntry(960, 960), SizesEntry(1920, 1920)]
        assert format_sizes(entries, 1920) == SIZES_2000

    def test_sizes_legacy_drops_last_entry(self) -> None:
        """Legacy sizes drop the last media query and end with a bare number."""
        entries = [SizesEntry(480, 480), SizesEntry(960, 960), SizesEntry(1920, 1920)]
        assert format_sizes(entries, 1920, legacy=True) == "(max-width: 480px) 480px, (max-width: 960px) 960px, 1920"

    def test_sizes_legacy_single_entry_is_kept(self) -> None:
        """With one entry there is nothing to drop."""
        assert format_sizes([SizesEntry(480, 480)], 480, legacy=True) == "(max-width: 480px) 480px, 480"

    def test_render_picture_layout(self) -> None:
        """The fragment has two typed sources and an img fallback."""
        markup = render_picture("A", "W", "S", "/images/x.jpg")
        assert markup == (
            "<picture>\n"
            '   <source srcset="A" sizes="S" type="image/avif">\n'
            '   <source srcset="W" sizes="S" type="image/webp">\n'
            '   <img src="/images/x.jpg" alt="">\n'
            "</picture>"
        )

    def test_render_picture_escapes_alt(self) -> None:
        """Alt text is HTML-escaped."""
        markup = render_picture("A", "W", "S", "/images/x.jpg", alt='Tom & "Jerry"')
        assert 'alt="Tom &amp; &quot;Jerry&quot;"' in markup


# ── TestBuildResponsiveSet ─────────────────────────────────────────────────


class TestBuildResponsiveSet:
    """Tests for the ``build_responsive_set`` function."""

    def test_wide_source_scenario(self, source_file: Path, fake_transcoder: Any) -> None:
        """W=2000 at 100% yields the breakpoint widths and matching srcsets."""
        result = build_responsive_set(source_file, transcoder=fake_transcoder)

        assert isinstance(result, ResponsiveSet)
        assert result.widths == (480, 960, 1920)
        assert result.avif_srcset == AVIF_2000
        assert result.webp_srcset == WEBP_2000
        assert result.sizes == SIZES_2000
        assert result.sizes.endswith(", 1920px")

    def test_codec_call_order_and_quality(self, source_file: Path, fake_transcoder: Any) -> None:
        """AVIF then WebP per breakpoint in ascending order, JPEG last."""
        build_responsive_set(source_file, transcoder=fake_transcoder)

        calls = [(c.fmt, c.width, c.quality) for c in fake_transcoder.calls]
        assert calls == [
            ("avif", 480, 60),
            ("webp", 480, 80),
            ("avif", 960, 60),
            ("webp", 960, 80),
            ("avif", 1920, 60),
            ("webp", 1920, 80),
            ("jpeg", 1920, 85),
        ]

    def test_files_written_next_to_source(self, source_file: Path, fake_transcoder: Any) -> None:
        """2N+1 files land beside the source, the JPEG unsuffixed."""
        result = build_responsive_set(source_file, transcoder=fake_transcoder)

        folder = source_file.parent
        names = sorted(p.name for p in folder.iterdir() if p != source_file)
        assert names == sorted(
            ["x-480.avif", "x-480.webp", "x-960.avif", "x-960.webp", "x-1920.avif", "x-1920.webp", "x.jpg"]
        )
        assert result.fallback.path == folder / "x.jpg"
        assert result.fallback.width == 1920
        assert len(result.renditions) == 2 * len(BREAKPOINTS)

    def test_html_fragment(self, source_file: Path, fake_transcoder: Any) -> None:
        """The emitted markup embeds the srcsets, sizes and JPEG URL."""
        result = build_responsive_set(source_file, transcoder=fake_transcoder)

        assert result.html == (
            "<picture>\n"
            f'   <source srcset="{AVIF_2000}" sizes="{SIZES_2000}" type="image/avif">\n'
            f'   <source srcset="{WEBP_2000}" sizes="{SIZES_2000}" type="image/webp">\n'
            '   <img src="/images/x.jpg" alt="">\n'
            "</picture>"
        )

    def test_narrow_source_half_scale(self, source_file: Path, make_transcoder: Any) -> None:
        """W=800 at 50% gives widths [240, 400, 400]."""
        codec = make_transcoder(width=800, height=600)
        result = build_responsive_set(source_file, 50, transcoder=codec)

        assert result.widths == (240, 400, 400)
        assert result.fallback.width == 400
        assert result.sizes.endswith("(max-width: 1920px) 400px, 400px")

    def test_legacy_sizes_reproduce_old_markup(self, source_file: Path, fake_transcoder: Any) -> None:
        """Legacy mode trims sizes twice and leaves the WebP separator."""
        result = build_responsive_set(source_file, transcoder=fake_transcoder, legacy_sizes=True)

        assert result.avif_srcset == AVIF_2000
        assert result.webp_srcset == f"{WEBP_2000}, "
        assert result.sizes == "(max-width: 480px) 480px, (max-width: 960px) 960px, 1920"

    def test_custom_prefix_and_alt(self, source_file: Path, fake_transcoder: Any) -> None:
        """URL prefix and alt text flow into the markup."""
        result = build_responsive_set(source_file, transcoder=fake_transcoder, url_prefix="/img", alt="A cat")

        assert result.avif_srcset.startswith("/img/x-480.avif 480w")
        assert '<img src="/img/x.jpg" alt="A cat">' in result.html

    @pytest.mark.parametrize("scale", [0, -5])
    def test_invalid_scale_skips_codec(self, source_file: Path, fake_transcoder: Any, scale: int) -> None:
        """A non-positive scale fails before the codec is touched."""
        with pytest.raises(InvalidScaleError):
            build_responsive_set(source_file, scale, transcoder=fake_transcoder)

        assert fake_transcoder.identified == []
        assert fake_transcoder.calls == []

    def test_missing_source_raises(self, tmp_path: Path, fake_transcoder: Any) -> None:
        """A missing source surfaces as ``SourceNotFoundError``."""
        with pytest.raises(SourceNotFoundError):
            build_responsive_set(tmp_path / "nope.png", transcoder=fake_transcoder)

    def test_codec_failure_reports_breakpoint(self, source_file: Path, make_transcoder: Any) -> None:
        """A failed encode aborts with the format and breakpoint, keeping earlier files."""
        codec = make_transcoder(fail_on=("webp", 960))

        with pytest.raises(CodecInvocationError, match="breakpoint 960px") as excinfo:
            build_responsive_set(source_file, transcoder=codec)

        assert excinfo.value.fmt == "webp"
        assert excinfo.value.breakpoint == 960
        folder = source_file.parent
        assert (folder / "x-480.webp").exists()
        assert (folder / "x-960.avif").exists()
        assert not (folder / "x.jpg").exists()

    def test_fallback_failure_has_no_breakpoint(self, source_file: Path, make_transcoder: Any) -> None:
        """A failed JPEG fallback is reported without a breakpoint."""
        codec = make_transcoder(fail_on=("jpeg", 1920))

        with pytest.raises(CodecInvocationError, match="fallback") as excinfo:
            build_responsive_set(source_file, transcoder=codec)

        assert excinfo.value.breakpoint is None

    def test_rerun_is_identical(self, source_file: Path, fake_transcoder: Any) -> None:
        """Running twice with the same inputs gives the same markup."""
        first = build_responsive_set(source_file, transcoder=fake_transcoder)
        second = build_responsive_set(source_file, transcoder=fake_transcoder)

        assert first.html == second.html

    def test_emits_log_and_progress_events(self, source_file: Path, fake_transcoder: Any) -> None:
        """Diagnostics and per-breakpoint progress go through the event bus."""
        bus = EventBus()
        logs: list[str] = []
        progress: list[dict[str, Any]] = []
        completed: list[dict[str, Any]] = []
        bus.subscribe("log", lambda **kw: logs.append(kw["message"]))
        bus.subscribe("progress", lambda **kw: progress.append(kw))
        bus.subscribe("completed", lambda **kw: completed.append(kw))

        build_responsive_set(source_file, transcoder=fake_transcoder, event_bus=bus)

        assert logs[0] == "2000x1000"
        assert logs[1] == str(source_file.with_suffix(""))
        assert logs[2] == "2000 100"
        assert "doing 480 to 480 100% 480" in logs
        assert f"Generated {source_file.parent / 'x.jpg'}" in logs
        assert [p["current"] for p in progress] == [1, 2, 3]
        assert all(p["total"] == 3 and p["tool"] == "responsive_set" for p in progress)
        assert len(completed) == 1
