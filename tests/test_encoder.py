import subprocess
from pathlib import Path

import pytest

from sceneloom.config import RenderSettings
from sceneloom.encoder import build_ffmpeg_command, encode
from sceneloom.errors import AssetNotFoundError, EncodeError
from sceneloom.renderer import RenderResult


class FakeRunner:
    def __init__(self, error: Exception | None = None) -> None:
        self.commands: list = []
        self.error = error

    def __call__(self, command, check: bool = False, capture_output: bool = False):
        self.commands.append(command)
        if self.error is not None:
            raise self.error
        return subprocess.CompletedProcess(command, 0, b"", b"")


def rendered(tmp_path: Path, count: int = 3, first: int = 0) -> RenderResult:
    frames = []
    for tick in range(first, first + count):
        path = tmp_path / f"frame{tick:05d}.jpeg"
        path.write_bytes(b"jpeg")
        frames.append(path)
    return RenderResult(tick_count=first + count, out_dir=tmp_path, frames=frames, first_frame=first)


def test_mp4_command_with_audio() -> None:
    settings = RenderSettings(output="mp4", shorter=True)
    command = build_ffmpeg_command(settings, Path("out"), 12, Path("video.mp4"), audio_path=Path("song.ogg"))
    assert command[:8] == ["ffmpeg", "-y", "-framerate", "60", "-start_number", "12", "-i", "out/frame%05d.jpeg"]
    assert command[8:16] == ["-i", "song.ogg", "-c:a", "mp3", "-map", "0:v", "-map", "1:a"]
    assert "-shortest" in command
    assert command[-1] == "video.mp4"


def test_mp4_command_without_audio_ignores_shorter() -> None:
    command = build_ffmpeg_command(RenderSettings(shorter=True), Path("out"), 0, Path("video.mp4"))
    assert "-map" not in command
    assert "-shortest" not in command
    assert ["-c:v", "libx264", "-pix_fmt", "yuv420p"] == command[8:12]


def test_gif_commands_differ_only_in_loop_flag() -> None:
    gif = build_ffmpeg_command(RenderSettings(output="gif"), Path("out"), 0, Path("a.gif"))
    loop = build_ffmpeg_command(RenderSettings(output="gifloop"), Path("out"), 0, Path("a.gif"))
    assert gif[gif.index("-loop") + 1] == "-1"
    assert loop[loop.index("-loop") + 1] == "0"
    assert gif[gif.index("-vf") + 1] == "fps=30,scale=360:-1"


def test_none_output_has_no_command() -> None:
    with pytest.raises(EncodeError):
        build_ffmpeg_command(RenderSettings(output="none"), Path("out"), 0, Path("x"))


def test_encode_runs_ffmpeg_and_cleans_frames(tmp_path: Path) -> None:
    result = rendered(tmp_path, first=5)
    runner = FakeRunner()
    settings = RenderSettings(output_path=tmp_path / "movie.mp4")
    assert encode(result, settings, runner=runner) == tmp_path / "movie.mp4"
    assert len(runner.commands) == 1
    assert runner.commands[0][5] == "5"
    assert not any(path.exists() for path in result.frames)


def test_encode_keeps_frames_when_asked(tmp_path: Path) -> None:
    result = rendered(tmp_path)
    encode(result, RenderSettings(keep_frames=True, output_path=tmp_path / "m.mp4"), runner=FakeRunner())
    assert all(path.exists() for path in result.frames)


def test_encode_none_output_is_noop(tmp_path: Path) -> None:
    runner = FakeRunner()
    result = rendered(tmp_path)
    assert encode(result, RenderSettings(output="none"), runner=runner) is None
    assert runner.commands == []
    assert all(path.exists() for path in result.frames)


def test_encode_without_frames_fails(tmp_path: Path) -> None:
    with pytest.raises(EncodeError):
        encode(RenderResult(tick_count=10, out_dir=tmp_path), RenderSettings(), runner=FakeRunner())


def test_encode_missing_audio_fails(tmp_path: Path) -> None:
    settings = RenderSettings(audio_path=str(tmp_path / "missing.ogg"))
    with pytest.raises(AssetNotFoundError):
        encode(rendered(tmp_path), settings, runner=FakeRunner())


def test_encode_passes_existing_audio(tmp_path: Path) -> None:
    audio = tmp_path / "track.ogg"
    audio.write_bytes(b"ogg")
    runner = FakeRunner()
    encode(rendered(tmp_path), RenderSettings(audio_path=str(audio), output_path=tmp_path / "o.mp4"), runner=runner)
    assert str(audio) in runner.commands[0]


def test_encode_reports_ffmpeg_failure(tmp_path: Path) -> None:
    failure = subprocess.CalledProcessError(1, ["ffmpeg"], stderr=b"Unknown encoder 'libx264'")
    with pytest.raises(EncodeError, match="libx264"):
        encode(rendered(tmp_path), RenderSettings(output_path=tmp_path / "o.mp4"), runner=FakeRunner(failure))


def test_encode_reports_missing_executable(tmp_path: Path) -> None:
    settings = RenderSettings(ffmpeg="no-such-ffmpeg", output_path=tmp_path / "o.mp4")
    with pytest.raises(EncodeError, match="not found"):
        encode(rendered(tmp_path), settings, runner=FakeRunner(FileNotFoundError("no-such-ffmpeg")))
