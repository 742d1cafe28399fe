"""Compact text encoding of a view state, e.g. ``re=-2.5&im=1.0&scale=200.0``."""

from __future__ import annotations

import math
import re
from typing import Optional

from .geometry import Complex, ViewState

KEYS = ("re", "im", "scale")

_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")


def parse_float(text: str) -> float:
    """Parse the longest numeric prefix of ``text``; NaN when there is none."""

    match = _FLOAT_PREFIX.match(text)
    if match is None:
        return math.nan
    return float(match.group(1))


def encode(view: ViewState) -> str:
    return "re={0!r}&im={1!r}&scale={2!r}".format(
        float(view.top_left.re), float(view.top_left.im), float(view.scale)
    )


def decode(token: Optional[str]) -> Optional[ViewState]:
    """Decode a token produced by :func:`encode`.

    An empty token means "no saved state" and returns ``None``. Missing keys and
    unparsable values come back as NaN fields, which fail validation.
    """

    if token is None:
        return None
    token = token.strip()
    if token.startswith("#"):
        token = token[1:]
    if not token:
        return None

    parsed: dict[str, float] = {}
    for pair in token.split("&"):
        key, _, value = pair.partition("=")
        parsed[key.strip()] = parse_float(value)

    return ViewState(
        top_left=Complex(re=parsed.get("re", math.nan), im=parsed.get("im", math.nan)),
        scale=parsed.get("scale", math.nan),
    )
