import math

from sceneloom import Box, Canvas, Text, pin_to, random_move, tween, wait_frames, wait_until_time


def greeting(canvas: Canvas):
    """Drop a title to the middle of the screen and back out."""

    title = Text("Hello World!", canvas.center_x, 0)
    yield [title]

    yield from tween(title, 180, {"y": canvas.center_y}, "ease_out")
    yield from wait_frames(60)
    yield from tween(title, 180, {"y": canvas.height + 48}, "ease_in")


def orbit(canvas: Canvas):
    """A label pinned to a spinning, growing box."""

    box = Box("steelblue", canvas.center_x - 100, canvas.center_y - 100, 200, 200, radius=16)
    label = Text("pinned", canvas.center_x, canvas.center_y - 140, font_size="32px")
    yield [box, label]

    yield pin_to(label, box, duration=300)
    yield tween(box, 240, {"rotation": math.tau}, "ease_in_out_cubic")
    yield from tween(box, 240, {"w": 300, "h": 300}, "ease_out_back")
    yield from tween(box, 60, {"opacity": 0})


def jitter(canvas: Canvas):
    """Shake a box, then fade the caption three seconds after the scene starts."""

    box = Box("crimson", canvas.quarter_x, canvas.quarter_y, 120, 120)
    caption = Text("shaky", canvas.center_x, canvas.three_quarters_y)
    yield [box, caption]

    now = yield
    yield random_move(box, 120, {"x": (canvas.quarter_x, canvas.quarter_x - 20, canvas.quarter_x + 20)}, 4)
    yield from wait_until_time(now, (now + 180) / 60)
    yield from tween(caption, 30, {"opacity": 0})
