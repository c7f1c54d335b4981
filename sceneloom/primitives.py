"""
Reusable animation coroutines.

Every primitive is a generator that suspends once per tick.  Scenes compose
them two ways:

* ``yield from tween(...)`` delegates: the scene is blocked until the tween
  finishes.
* ``yield tween(...)`` spawns: the scheduler takes ownership of the generator
  and steps it alongside the scene, which continues on the same tick.

The value sent into a suspended primitive is the current global tick (or
``None`` when driven by hand with ``next()``).
"""

from __future__ import annotations

import math
import random
from collections.abc import Generator
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .config import FPS
from .easing import EasingLike, resolve_easing
from .errors import DegenerateGeometryError
from .objects import has_size, require_properties

Coroutine = Generator[Any, Any, None]


def is_coroutine(value: object) -> bool:
    return isinstance(value, Generator)


def _continue(then: Optional[Coroutine]) -> Coroutine:
    if then is None:
        return
    if not is_coroutine(then):
        raise TypeError(f"continuation must be a generator, got {type(then).__name__}")
    yield from then


def tween(
    target: object,
    duration: int,
    properties: Mapping[str, float],
    easing: EasingLike = "linear",
    then: Optional[Coroutine] = None,
) -> Coroutine:
    """
    Interpolate ``properties`` of ``target`` to their final values over
    ``duration`` ticks.

    Start values are read when the tween first runs, not when it is created.
    After the last eased step every property is assigned its exact final
    value, so the destination is always reached regardless of easing drift.
    """

    ease = resolve_easing(easing)
    require_properties(target, properties)
    start = {name: getattr(target, name) for name in properties}
    duration = int(duration)

    for frame in range(max(0, duration)):
        progress = ease(frame / duration)
        for name, end in properties.items():
            setattr(target, name, start[name] + progress * (end - start[name]))
        yield

    for name, end in properties.items():
        setattr(target, name, end)

    yield from _continue(then)


def wait_frames(frames: int, then: Optional[Coroutine] = None) -> Coroutine:
    """Suspend for exactly ``frames`` ticks."""

    for _ in range(max(0, int(frames))):
        yield
    yield from _continue(then)


def wait_until_time(now: Optional[int], seconds: float, then: Optional[Coroutine] = None) -> Coroutine:
    """
    Suspend until the global tick reaches ``seconds`` on the 60 tick clock.

    ``now`` is the tick the caller last saw, typically obtained with
    ``now = yield`` inside a scene.  Each resumption that carries a tick
    refreshes it; resumptions without one advance it by a single tick.
    """

    current = int(now or 0)
    deadline = seconds * FPS
    while current < deadline:
        sent = yield
        current = int(sent) if sent is not None else current + 1
    yield from _continue(then)


def _rotate(dx: float, dy: float, angle: float) -> Tuple[float, float]:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return dx * cos_a - dy * sin_a, dx * sin_a + dy * cos_a


def pin_to(
    pinned: object,
    base: object,
    duration: Optional[int] = None,
    then: Optional[Coroutine] = None,
) -> Coroutine:
    """
    Keep ``pinned`` rigidly attached to ``base``.

    The offset, rotation difference and size ratios are captured when the pin
    first runs.  Every tick ``pinned`` is re-placed from ``base``'s current
    position, rotation and scale.  With ``duration=None`` this never
    finishes and must be spawned, never delegated into.
    """

    require_properties(pinned, ("x", "y", "rotation"))
    require_properties(base, ("x", "y", "rotation"))

    base_rotation = base.rotation  # type: ignore[attr-defined]
    rotation_delta = pinned.rotation - base_rotation  # type: ignore[attr-defined]
    # offset in base's local frame at bind time
    local_x, local_y = _rotate(
        pinned.x - base.x,  # type: ignore[attr-defined]
        pinned.y - base.y,  # type: ignore[attr-defined]
        -base_rotation,
    )

    scaled = has_size(base)
    if scaled:
        base_w, base_h = base.w, base.h  # type: ignore[attr-defined]
        if base_w == 0 or base_h == 0:
            raise DegenerateGeometryError(
                f"cannot pin to a {getattr(base, 'type', 'object')} with zero size ({base_w}x{base_h})"
            )
    sized = scaled and has_size(pinned)
    if sized:
        ratio_w = pinned.w / base_w  # type: ignore[attr-defined]
        ratio_h = pinned.h / base_h  # type: ignore[attr-defined]

    remaining = duration
    while remaining is None or remaining > 0:
        scale_x = base.w / base_w if scaled else 1.0  # type: ignore[attr-defined]
        scale_y = base.h / base_h if scaled else 1.0  # type: ignore[attr-defined]
        offset_x, offset_y = _rotate(local_x * scale_x, local_y * scale_y, base.rotation)  # type: ignore[attr-defined]
        pinned.x = base.x + offset_x  # type: ignore[attr-defined]
        pinned.y = base.y + offset_y  # type: ignore[attr-defined]
        pinned.rotation = base.rotation + rotation_delta  # type: ignore[attr-defined]
        if sized:
            pinned.w = ratio_w * base.w  # type: ignore[attr-defined]
            pinned.h = ratio_h * base.h  # type: ignore[attr-defined]
        if remaining is not None:
            remaining -= 1
        yield

    yield from _continue(then)


def random_move(
    target: object,
    duration: int,
    ranges: Mapping[str, Sequence[float]],
    refresh: int,
    then: Optional[Coroutine] = None,
    rng: Optional[random.Random] = None,
) -> Coroutine:
    """
    Jitter properties of ``target`` for ``duration`` ticks.

    ``ranges`` maps each property to ``(rest, low, high)``.  Every ``refresh``
    ticks each property jumps to a uniform value in ``[low, high)``; when the
    move ends every property returns to its rest value.
    """

    refresh = int(refresh)
    if refresh < 1:
        raise ValueError("refresh interval must be at least one tick")
    require_properties(target, ranges)
    bounds: Dict[str, Tuple[float, float, float]] = {}
    for name, spec in ranges.items():
        if len(spec) != 3:
            raise ValueError(f"range for '{name}' must be (rest, low, high)")
        rest, low, high = spec
        bounds[name] = (rest, low, high)
    source = rng if rng is not None else random

    for frame in range(max(0, int(duration))):
        if frame % refresh == 0:
            for name, (_, low, high) in bounds.items():
                setattr(target, name, low + source.random() * (high - low))
        yield

    for name, (rest, _, _) in bounds.items():
        setattr(target, name, rest)

    yield from _continue(then)


def sequence(*coroutines: Coroutine) -> Coroutine:
    """Run ``coroutines`` one after another."""

    for coroutine in coroutines:
        yield from _continue(coroutine)


def parallel(*coroutines: Coroutine) -> Coroutine:
    """
    Spawn every coroutine but the last and block on the last one.

    ``yield from parallel(a, b)`` starts ``a`` in the background and waits
    for ``b``.
    """

    if not coroutines:
        return
    *background, foreground = coroutines
    for coroutine in background:
        if not is_coroutine(coroutine):
            raise TypeError(f"cannot spawn {type(coroutine).__name__}")
        yield coroutine
    yield from _continue(foreground)
