"""The active view of an interactive exploration."""

from __future__ import annotations

from typing import Optional

from .codec import decode, encode
from .escape import DEFAULT_MAX_ITERATIONS, check_max_iterations
from .geometry import ViewState, check_dimensions, default_view_state, is_valid
from .gesture import Point, apply_drag
from .palette import DEFAULT_PALETTE, Palette
from .renderer import RenderBuffer, render
from .verbosity import log


class ViewSession:
    """Own the current view state for one buffer size.

    Every replacement is validated before it is accepted; anything invalid
    (a corrupt token, a zero-width drag) falls back to the default view, so
    ``view`` is always safe to render and persist.
    """

    def __init__(
        self,
        width: int,
        height: int,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        palette: Optional[Palette] = None,
        *,
        device: Optional[str] = None,
    ) -> None:
        check_dimensions(width, height)
        self.width = width
        self.height = height
        self.max_iterations = check_max_iterations(max_iterations)
        self.palette = palette if palette is not None else DEFAULT_PALETTE
        self.device = device
        self.default_view = default_view_state(width, height)
        self.view = self.default_view

    def _accept(self, view: Optional[ViewState], reason: str) -> ViewState:
        if is_valid(view):
            self.view = view
        else:
            log("Falling back to the default view (%s): %r" % (reason, view))
            self.view = self.default_view
        return self.view

    def load(self, token: Optional[str]) -> ViewState:
        view = decode(token)
        if view is None:
            self.view = self.default_view
            return self.view
        return self._accept(view, "invalid saved state")

    def drag(self, start: Point, end: Point) -> ViewState:
        return self._accept(apply_drag(self.view, start, end, self.width), "degenerate drag")

    def reset(self) -> ViewState:
        self.view = self.default_view
        return self.view

    def render(self, out: Optional[RenderBuffer] = None) -> RenderBuffer:
        return render(
            self.view,
            self.width,
            self.height,
            self.max_iterations,
            self.palette,
            out=out,
            device=self.device,
        )

    def token(self) -> str:
        return encode(self.view)

    def zoom_factor(self) -> float:
        return self.view.scale / self.default_view.scale
