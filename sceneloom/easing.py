"""
Easing functions.

Every function maps normalised progress ``t`` in ``[0, 1]`` to eased
progress.  Back, elastic and bounce curves overshoot ``[0, 1]`` in between,
but all curves start at exactly ``0.0`` and end at exactly ``1.0``.
"""

from __future__ import annotations

import functools
import math
import re
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Union

from .errors import UnknownEasingError

EasingFunction = Callable[[float], float]
EasingLike = Union[EasingFunction, str]

_BACK_C1 = 1.70158
_BACK_C2 = _BACK_C1 * 1.525
_BACK_C3 = _BACK_C1 + 1.0
_ELASTIC_C4 = (2.0 * math.pi) / 3.0
_ELASTIC_C5 = (2.0 * math.pi) / 4.5
_BOUNCE_N1 = 7.5625
_BOUNCE_D1 = 2.75


def _exact_ends(func: EasingFunction) -> EasingFunction:
    @functools.wraps(func)
    def wrapper(t: float) -> float:
        if t <= 0.0:
            return 0.0
        if t >= 1.0:
            return 1.0
        return func(t)

    return wrapper


def linear(t: float) -> float:
    return t


@_exact_ends
def ease_in_quad(t: float) -> float:
    return t * t


@_exact_ends
def ease_out_quad(t: float) -> float:
    return t * (2.0 - t)


@_exact_ends
def ease_in_out_quad(t: float) -> float:
    return 2.0 * t * t if t < 0.5 else -1.0 + (4.0 - 2.0 * t) * t


@_exact_ends
def ease_in_cubic(t: float) -> float:
    return t * t * t


@_exact_ends
def ease_out_cubic(t: float) -> float:
    u = t - 1.0
    return 1.0 + u * u * u


@_exact_ends
def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4.0 * t * t * t
    return (t - 1.0) * (2.0 * t - 2.0) * (2.0 * t - 2.0) + 1.0


@_exact_ends
def ease_in_circ(t: float) -> float:
    return 1.0 - math.sqrt(1.0 - t * t)


@_exact_ends
def ease_out_circ(t: float) -> float:
    return math.sqrt(1.0 - (t - 1.0) ** 2)


@_exact_ends
def ease_in_out_circ(t: float) -> float:
    if t < 0.5:
        return (1.0 - math.sqrt(1.0 - (2.0 * t) ** 2)) / 2.0
    return (math.sqrt(1.0 - (-2.0 * t + 2.0) ** 2) + 1.0) / 2.0


@_exact_ends
def ease_out_bounce(t: float) -> float:
    if t < 1.0 / _BOUNCE_D1:
        return _BOUNCE_N1 * t * t
    if t < 2.0 / _BOUNCE_D1:
        t -= 1.5 / _BOUNCE_D1
        return _BOUNCE_N1 * t * t + 0.75
    if t < 2.5 / _BOUNCE_D1:
        t -= 2.25 / _BOUNCE_D1
        return _BOUNCE_N1 * t * t + 0.9375
    t -= 2.625 / _BOUNCE_D1
    return _BOUNCE_N1 * t * t + 0.984375


@_exact_ends
def ease_in_bounce(t: float) -> float:
    return 1.0 - ease_out_bounce(1.0 - t)


@_exact_ends
def ease_in_out_bounce(t: float) -> float:
    if t < 0.5:
        return (1.0 - ease_out_bounce(1.0 - 2.0 * t)) / 2.0
    return (1.0 + ease_out_bounce(2.0 * t - 1.0)) / 2.0


@_exact_ends
def ease_in_back(t: float) -> float:
    return _BACK_C3 * t * t * t - _BACK_C1 * t * t


@_exact_ends
def ease_out_back(t: float) -> float:
    u = t - 1.0
    return 1.0 + _BACK_C3 * u * u * u + _BACK_C1 * u * u


@_exact_ends
def ease_in_out_back(t: float) -> float:
    if t < 0.5:
        return ((2.0 * t) ** 2 * ((_BACK_C2 + 1.0) * 2.0 * t - _BACK_C2)) / 2.0
    return ((2.0 * t - 2.0) ** 2 * ((_BACK_C2 + 1.0) * (t * 2.0 - 2.0) + _BACK_C2) + 2.0) / 2.0


@_exact_ends
def ease_in_elastic(t: float) -> float:
    return -(2.0 ** (10.0 * t - 10.0)) * math.sin((t * 10.0 - 10.75) * _ELASTIC_C4)


@_exact_ends
def ease_out_elastic(t: float) -> float:
    return 2.0 ** (-10.0 * t) * math.sin((t * 10.0 - 0.75) * _ELASTIC_C4) + 1.0


@_exact_ends
def ease_in_out_elastic(t: float) -> float:
    if t < 0.5:
        return -(2.0 ** (20.0 * t - 10.0) * math.sin((20.0 * t - 11.125) * _ELASTIC_C5)) / 2.0
    return (2.0 ** (-20.0 * t + 10.0) * math.sin((20.0 * t - 11.125) * _ELASTIC_C5)) / 2.0 + 1.0


EASINGS: Mapping[str, EasingFunction] = MappingProxyType(
    {
        func.__name__: func
        for func in (
            linear,
            ease_in_quad,
            ease_out_quad,
            ease_in_out_quad,
            ease_in_cubic,
            ease_out_cubic,
            ease_in_out_cubic,
            ease_in_circ,
            ease_out_circ,
            ease_in_out_circ,
            ease_in_bounce,
            ease_out_bounce,
            ease_in_out_bounce,
            ease_in_back,
            ease_out_back,
            ease_in_out_back,
            ease_in_elastic,
            ease_out_elastic,
            ease_in_out_elastic,
        )
    }
)

# Names used by older project scripts.
_ALIASES: Dict[str, str] = {
    "no_ease": "linear",
    "ease_in": "ease_in_quad",
    "ease_out": "ease_out_quad",
    "ease_in_out": "ease_in_out_quad",
    "ease_in_square": "ease_in_cubic",
    "ease_out_square": "ease_out_cubic",
    "ease_in_out_square": "ease_in_out_cubic",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _normalise_name(name: str) -> str:
    snake = _CAMEL_BOUNDARY.sub("_", str(name).strip())
    return re.sub(r"[\s\-]+", "_", snake).lower()


def get_easing(name: str) -> EasingFunction:
    """
    Look up an easing function by name.

    Accepts canonical names (``ease_out_bounce``), camelCase
    (``easeOutBounce``) and the legacy aliases (``ease_in_square``).
    """

    key = _normalise_name(name)
    key = _ALIASES.get(key, key)
    func = EASINGS.get(key)
    if func is None:
        raise UnknownEasingError(f"Easing '{name}' not registered")
    return func


def resolve_easing(easing: EasingLike | None) -> EasingFunction:
    if easing is None:
        return linear
    if isinstance(easing, str):
        return get_easing(easing)
    if not callable(easing):
        raise TypeError(f"easing must be callable or a name, got {type(easing).__name__}")
    return easing


def available_easings() -> List[str]:
    return sorted(EASINGS)
