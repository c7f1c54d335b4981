import random
from dataclasses import dataclass
from typing import ClassVar, List, Tuple

import pytest
from PIL import Image as PILImage

from sceneloom.config import Canvas, RenderSettings
from sceneloom.errors import AssetNotFoundError, RenderOutputError, SceneError
from sceneloom.objects import Box, Image, RenderObject, Text, Video
from sceneloom.primitives import random_move, tween, wait_frames
from sceneloom.renderer import Renderer, draw_frame


class RecordingSurface:
    def __init__(self, width: int = 64, height: int = 48) -> None:
        self.size = (width, height)
        self.calls: List[Tuple] = []

    def clear(self, color=None) -> None:
        self.calls.append(("clear", color))

    def set_global_alpha(self, alpha: float) -> None:
        self.calls.append(("alpha", alpha))

    def draw_text(self, text, x, y, font, color, rotation=0.0) -> None:
        self.calls.append(("text", text, x, y))

    def draw_image(self, image, x, y, w, h, rotation=0.0) -> None:
        self.calls.append(("image", x, y, w, h))

    def draw_rounded_rect(self, x, y, w, h, radius, color, rotation=0.0) -> None:
        self.calls.append(("rect", x, y, w, h, color))

    def to_jpeg(self, quality: int = 70) -> bytes:
        return b"jpeg"


def small_settings(tmp_path, **overrides) -> RenderSettings:
    values = dict(width=64, height=48, out_dir=tmp_path / "frames", cache_previews=False, seed=7)
    values.update(overrides)
    return RenderSettings(**values)


def moving_scene():
    box = Box("red", 0, 0, 16, 16, radius=3)
    shaky = Box("blue", 40, 20, 8, 8)
    yield [box, shaky]
    yield random_move(shaky, 24, {"y": (20.0, 0.0, 40.0)}, 5)
    yield from tween(box, 15, {"x": 48.0, "rotation": 1.0}, "ease_in_out_back")
    yield from tween(box, 10, {"y": 32.0, "opacity": 0.4})


def second_scene():
    box = Box("green", 10, 10, 20, 10)
    yield [box]
    yield from tween(box, 8, {"w": 40.0}, "ease_out_bounce")


def test_frame_skip_produces_identical_frames(tmp_path) -> None:
    full = Renderer(small_settings(tmp_path / "full")).render([moving_scene(), second_scene()])
    windowed = Renderer(small_settings(tmp_path / "window", start_frame=10, end_frame=20)).render(
        [moving_scene(), second_scene()]
    )

    assert full.tick_count == windowed.tick_count == 26 + 9
    assert windowed.first_frame == 10
    assert [path.name for path in windowed.frames] == [f"frame{i:05d}.jpeg" for i in range(10, 21)]
    for tick in range(10, 21):
        expected = (tmp_path / "full" / "frames" / f"frame{tick:05d}.jpeg").read_bytes()
        assert (tmp_path / "window" / "frames" / f"frame{tick:05d}.jpeg").read_bytes() == expected


def test_full_render_writes_every_tick(tmp_path) -> None:
    result = Renderer(small_settings(tmp_path)).render([second_scene()])
    assert result.tick_count == 9
    assert result.first_frame == 0
    assert len(result.frames) == 9
    assert all(path.exists() for path in result.frames)
    assert result.to_dict()["frames"] == 9


def test_prepare_output_removes_stale_frames(tmp_path) -> None:
    settings = small_settings(tmp_path)
    stale = settings.out_dir / "frame09999.jpeg"
    stale.parent.mkdir(parents=True)
    stale.write_bytes(b"old")
    Renderer(settings).render([second_scene()])
    assert not stale.exists()


def test_unwritable_output_raises(tmp_path) -> None:
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory")
    with pytest.raises(RenderOutputError):
        Renderer(small_settings(tmp_path, out_dir=blocker)).render([second_scene()])


def test_previews_hold_last_frame_of_each_scene(tmp_path) -> None:
    settings = small_settings(tmp_path, cache_previews=True)
    renderer = Renderer(settings)
    result = renderer.render([moving_scene(), second_scene()])

    assert renderer.previews is not None
    previews = renderer.previews.list()
    assert [(preview.index, preview.tick) for preview in previews] == [(0, 25), (1, 34)]
    assert previews[1].image == result.frames[-1].read_bytes()
    assert (settings.out_dir / "previews" / "index.json").exists()


def test_previews_skip_scenes_outside_window(tmp_path) -> None:
    renderer = Renderer(small_settings(tmp_path, cache_previews=True, end_frame=5))
    renderer.render([moving_scene(), second_scene()])
    previews = renderer.previews.list()
    assert [(preview.index, preview.tick) for preview in previews] == [(0, 5)]
    assert previews[0].image == (tmp_path / "frames" / "frame00005.jpeg").read_bytes()


def test_seed_makes_random_moves_repeatable(tmp_path) -> None:
    def jitter(values: list):
        box = Box("white", 0, 0, 4, 4)
        yield [box]
        yield random_move(box, 5, {"x": (0.0, 0.0, 100.0)}, 1)
        for _ in range(5):
            yield
            values.append(box.x)

    first: list = []
    second: list = []
    Renderer(small_settings(tmp_path / "a")).render([jitter(first)])
    random.random()
    Renderer(small_settings(tmp_path / "b")).render([jitter(second)])
    assert first == second


def test_draw_frame_skips_transparent_objects() -> None:
    surface = RecordingSurface()
    frame = (
        Box("red", 0, 0, 4, 4, opacity=0.0),
        Box("blue", 1, 1, 4, 4, opacity=0.005),
        Box("green", 2, 2, 4, 4, opacity=0.5),
    )
    assert draw_frame(surface, frame, Canvas(64, 48)) == 1
    assert ("rect", 2, 2, 4, 4, "green") in surface.calls
    assert ("alpha", 0.5) in surface.calls
    assert surface.calls[-1] == ("alpha", 1.0)


def test_draw_frame_culls_off_canvas_images(tmp_path) -> None:
    path = tmp_path / "pixel.png"
    PILImage.new("RGBA", (2, 2), "white").save(path)
    surface = RecordingSurface()
    on_screen = Image(str(path), 10, 10, 8, 8)
    off_screen = Image(str(path), 100, 10, 8, 8)
    mirrored = Image(str(path), 70, 10, -8, 8)
    draw_frame(surface, (on_screen, off_screen, mirrored), Canvas(64, 48))
    drawn = [call for call in surface.calls if call[0] == "image"]
    assert drawn == [("image", 10, 10, 8, 8), ("image", 70, 10, -8, 8)]


def test_draw_frame_unknown_type_raises() -> None:
    @dataclass(eq=False)
    class Blob(RenderObject):
        type: ClassVar[str] = "blob"

    with pytest.raises(SceneError):
        draw_frame(RecordingSurface(), (Blob(),), Canvas(64, 48))


def test_text_is_rasterised(tmp_path) -> None:
    def scene():
        yield [Text("Hi", 32, 30, font_size="20px")]
        yield from wait_frames(1)

    result = Renderer(small_settings(tmp_path)).render([scene()])
    assert len(result.frames) == 2
    with PILImage.open(result.frames[0]) as frame:
        assert frame.size == (64, 48)
        assert frame.convert("L").getextrema()[1] > 100


def test_video_frames_follow_current_time(tmp_path) -> None:
    clip = tmp_path / "clip"
    clip.mkdir()
    for index, color in ((1, "red"), (2, "blue")):
        PILImage.new("RGB", (4, 4), color).save(clip / f"frame{index:05d}.jpeg")
    video = Video(str(clip), 0, 0, 64, 48, framerate=60)
    assert video.frame_path() == clip / "frame00001.jpeg"

    def scene():
        yield [video]
        yield from tween(video, 1, {"current_time": 1.5})

    result = Renderer(small_settings(tmp_path)).render([scene()])
    with PILImage.open(result.frames[0]) as first, PILImage.open(result.frames[1]) as last:
        assert first.convert("RGB").getpixel((32, 24))[0] > 200
        assert last.convert("RGB").getpixel((32, 24))[2] > 200


def test_missing_video_frame_fails_the_run(tmp_path) -> None:
    def scene():
        yield [Video(str(tmp_path / "nowhere"), 0, 0, 32, 32)]
        yield from wait_frames(2)

    with pytest.raises(AssetNotFoundError):
        Renderer(small_settings(tmp_path)).render([scene()])


def test_missing_image_fails_on_construction(tmp_path) -> None:
    with pytest.raises(AssetNotFoundError):
        Image(str(tmp_path / "absent.png"), 0, 0, 10, 10)


def test_frame_skip_with_default_settings_and_random_moves(tmp_path) -> None:
    def scene():
        box = Box("white", 20, 10, 8, 8)
        yield [box]
        yield from random_move(box, 30, {"x": (20.0, 0.0, 48.0)}, 3)

    def settings(out_dir, **window) -> RenderSettings:
        return RenderSettings(width=64, height=48, out_dir=out_dir, cache_previews=False, **window)

    Renderer(settings(tmp_path / "full")).render([scene()])
    random.random()
    Renderer(settings(tmp_path / "window", start_frame=10, end_frame=20)).render([scene()])

    for tick in range(10, 21):
        name = f"frame{tick:05d}.jpeg"
        assert (tmp_path / "window" / name).read_bytes() == (tmp_path / "full" / name).read_bytes()
