from pathlib import Path

import pytest

from sceneloom.config import Canvas, OutputKind, RenderSettings, load_settings
from sceneloom.errors import ConfigError


def test_defaults() -> None:
    settings = RenderSettings()
    assert settings.start_frame == 0
    assert settings.end_frame == -1
    assert settings.seed == 0
    assert settings.output is OutputKind.MP4
    assert settings.canvas() == Canvas(1280, 720)
    assert settings.resolved_output_path() == Path("out.mp4")


def test_window_semantics() -> None:
    full = RenderSettings()
    assert full.in_window(0) and full.in_window(10_000)

    window = RenderSettings(start_frame=10, end_frame=20)
    assert not window.in_window(9)
    assert window.in_window(10)
    assert window.in_window(20)
    assert not window.in_window(21)

    open_ended = RenderSettings(start_frame=5)
    assert not open_ended.in_window(4)
    assert open_ended.in_window(99_999)


def test_invalid_window_rejected() -> None:
    with pytest.raises(ValueError):
        RenderSettings(start_frame=10, end_frame=5)
    with pytest.raises(ValueError):
        RenderSettings(start_frame=-1)


def test_canvas_anchor_points() -> None:
    canvas = Canvas(1200, 600)
    assert (canvas.center_x, canvas.center_y) == (600, 300)
    assert canvas.third_x == 400
    assert canvas.two_thirds_y == 400
    assert canvas.quarter_x == 300
    assert canvas.three_quarters_y == 450
    assert canvas.size == (1200, 600)


def test_load_settings_from_yaml_with_aliases(tmp_path: Path) -> None:
    profile = tmp_path / "profile.yaml"
    profile.write_text(
        "type: GIFLOOP\naudioPath: music.ogg\nvidLength: 900\nquality: 200\nstartFrame: 3\n",
        encoding="utf-8",
    )
    settings = load_settings(profile, end_frame=30)
    assert settings.output is OutputKind.GIFLOOP
    assert settings.audio_path == "music.ogg"
    assert settings.length_hint == 900
    assert settings.jpeg_quality == 95
    assert (settings.start_frame, settings.end_frame) == (3, 30)
    assert settings.resolved_output_path() == Path("out.gif")


def test_missing_profile_uses_defaults(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "missing.yaml") == RenderSettings()


def test_bad_profiles_raise_config_error(tmp_path: Path) -> None:
    broken = tmp_path / "broken.yaml"
    broken.write_text("output: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(broken)

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just a string", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(scalar)

    invalid = tmp_path / "invalid.yaml"
    invalid.write_text("output: webm", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(invalid)


def test_merged_ignores_unset_values() -> None:
    base = RenderSettings(output="gif", seed=3)
    merged = base.merged(output=None, seed=None, start_frame=4)
    assert merged.output is OutputKind.GIF
    assert merged.seed == 3
    assert merged.start_frame == 4
    with pytest.raises(ConfigError):
        base.merged(width=0)


def test_non_positive_length_hint_means_unknown() -> None:
    assert RenderSettings(length_hint=0).length_hint is None
