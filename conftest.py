"""Shared fixtures: a recording stand-in for the image codec."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from site_toolbox.codec import EncodeProfile, Transcoder
from site_toolbox.core.datatypes import SourceImage
from site_toolbox.core.exceptions import CodecInvocationError, SourceNotFoundError


@dataclass
class Call:
    """One recorded ``transcode`` invocation."""

    fmt: str
    width: int
    output: Path
    quality: int | None


@dataclass
class RecordingTranscoder(Transcoder):
    """Pretends every source is *width* x *height*; writes empty files."""

    width: int = 2000
    height: int = 1000
    fail_on: tuple[str, int] | None = None
    identified: list[Path] = field(default_factory=list)
    calls: list[Call] = field(default_factory=list)

    name = "recording"

    def identify(self, path: Path) -> SourceImage:
        if not path.exists():
            msg = f"Source image '{path}' does not exist"
            raise SourceNotFoundError(msg)
        self.identified.append(path)
        return SourceImage(path=path, width=self.width, height=self.height, format="png")

    def transcode(
        self,
        source: SourceImage,
        profile: EncodeProfile,
        width: int,
        output: Path,
        *,
        alpha: bool = False,
    ) -> Path:
        if self.fail_on == (profile.name, width):
            msg = "encoder exploded"
            raise CodecInvocationError(msg, fmt=profile.name, width=width)
        self.calls.append(Call(fmt=profile.name, width=width, output=output, quality=profile.quality))
        output.write_bytes(b"")
        return output


@pytest.fixture()
def source_file(tmp_path: Path) -> Path:
    """An (empty) source file the recording transcoder can 'identify'."""
    path = tmp_path / "photos" / "x.png"
    path.parent.mkdir()
    path.write_bytes(b"")
    return path


@pytest.fixture()
def fake_transcoder() -> RecordingTranscoder:
    """A 2000x1000 recording transcoder."""
    return RecordingTranscoder()


@pytest.fixture()
def make_transcoder() -> type[RecordingTranscoder]:
    """The recording transcoder class, for tests that need custom dimensions."""
    return RecordingTranscoder
