"""Derive the next view state from a drag-selection gesture."""

from __future__ import annotations

from dataclasses import dataclass

from .geometry import Complex, ViewState, divide

Point = tuple[float, float]


@dataclass(frozen=True)
class DragGesture:
    """Pixel coordinates where a drag started and where it was released."""

    start: Point
    end: Point

    @property
    def width(self) -> float:
        return self.end[0] - self.start[0]


def apply_drag(view: ViewState, start: Point, end: Point, buffer_width: int) -> ViewState:
    """Zoom into the rectangle dragged from ``start`` to ``end``.

    The plane point under ``start`` becomes the new top left corner and the
    dragged width becomes the new horizontal field of view. A zero-width drag
    yields a non-finite scale and a right-to-left drag a negative one; both
    come back as invalid views for the caller to reject.
    """

    start_x, start_y = float(start[0]), float(start[1])
    end_x = float(end[0])
    top_left = Complex(
        re=divide(start_x, view.scale) + view.top_left.re,
        im=view.top_left.im - divide(start_y, view.scale),
    )
    plane_width = divide(end_x - start_x, view.scale)
    return ViewState(top_left=top_left, scale=divide(buffer_width, plane_width))


def apply_gesture(view: ViewState, gesture: DragGesture, buffer_width: int) -> ViewState:
    return apply_drag(view, gesture.start, gesture.end, buffer_width)
