"""
Video/GIF assembly through an external ``ffmpeg`` process.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Callable, List, Optional

from .config import FPS, OutputKind, RenderSettings
from .errors import AssetNotFoundError, EncodeError
from .renderer import RenderResult
from .utils.assets import resolve_asset

LOG = logging.getLogger(__name__)

FRAME_PATTERN = "frame%05d.jpeg"
GIF_WIDTH = 360
STDERR_TAIL = 2000

Runner = Callable[..., "subprocess.CompletedProcess[bytes]"]


def build_ffmpeg_command(
    settings: RenderSettings,
    frames_dir: Path,
    first_frame: int,
    output_path: Path,
    *,
    audio_path: Optional[Path] = None,
) -> List[str]:
    """
    Build the ffmpeg argument list for ``settings.output``.

    mp4 muxes the optional audio track (cut to the video with ``shorter``);
    gif and gifloop halve the frame rate and scale down, differing only in
    whether the GIF loops.
    """

    kind = settings.output
    if kind is OutputKind.NONE:
        raise EncodeError("output kind 'none' has no ffmpeg command")

    command = [
        settings.ffmpeg,
        "-y",
        "-framerate",
        str(FPS),
        "-start_number",
        str(int(first_frame)),
        "-i",
        str(Path(frames_dir) / FRAME_PATTERN),
    ]

    if kind is OutputKind.MP4:
        if audio_path is not None:
            command += ["-i", str(audio_path), "-c:a", "mp3", "-map", "0:v", "-map", "1:a"]
        command += ["-c:v", "libx264", "-pix_fmt", "yuv420p"]
        if audio_path is not None and settings.shorter:
            command.append("-shortest")
    else:
        loop = "0" if kind is OutputKind.GIFLOOP else "-1"
        command += ["-vf", f"fps={FPS // 2},scale={GIF_WIDTH}:-1", "-loop", loop]

    command.append(str(output_path))
    return command


def _cleanup(frames: List[Path]) -> None:
    for frame in frames:
        try:
            frame.unlink()
        except FileNotFoundError:
            continue


def encode(
    result: RenderResult,
    settings: RenderSettings,
    *,
    audio_path: Optional[str] = None,
    runner: Runner = subprocess.run,
) -> Optional[Path]:
    """
    Assemble the frames in ``result`` into the configured output.

    Returns the written file, or ``None`` for output kind ``none``.  Rendered
    frames are deleted afterwards unless ``settings.keep_frames`` is set.
    """

    output_path = settings.resolved_output_path()
    if output_path is None:
        LOG.info("Output kind 'none'; leaving %d frame(s) in %s", len(result.frames), result.out_dir)
        return None
    if not result.frames or result.first_frame is None:
        raise EncodeError("no frames were rendered; nothing to encode")

    audio_source = audio_path if audio_path is not None else settings.audio_path
    audio: Optional[Path] = None
    if audio_source and settings.output is OutputKind.MP4:
        audio = resolve_asset(audio_source)
        if not audio.exists():
            raise AssetNotFoundError(audio)

    command = build_ffmpeg_command(
        settings, result.out_dir, result.first_frame, output_path, audio_path=audio
    )
    LOG.info("Encoding %d frame(s): %s", len(result.frames), shlex.join(command))
    try:
        runner(command, check=True, capture_output=True)
    except FileNotFoundError as exc:
        raise EncodeError(f"encoder executable '{settings.ffmpeg}' not found") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or b"").decode("utf-8", errors="replace")[-STDERR_TAIL:]
        raise EncodeError(f"ffmpeg exited with status {exc.returncode}: {stderr}") from exc

    if not settings.keep_frames:
        _cleanup(result.frames)
    LOG.info("Wrote %s", output_path)
    return output_path
