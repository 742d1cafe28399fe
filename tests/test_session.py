import pytest

from mandelview.codec import encode
from mandelview.geometry import Complex, ViewState, default_view_state, is_valid
from mandelview.palette import HuePalette
from mandelview.session import ViewSession


@pytest.fixture
def session():
    return ViewSession(35, 20, max_iterations=40)


def test_starts_on_default_view(session):
    assert session.view == default_view_state(35, 20)
    assert session.view.scale == 10.0
    assert session.token() == "re=-2.5&im=1.0&scale=10.0"
    assert session.zoom_factor() == 1.0


def test_load_valid_token(session):
    view = ViewState(Complex(-0.8, 0.2), 1400.0)
    assert session.load(encode(view)) == view
    assert session.view == view


@pytest.mark.parametrize("token", [None, "", "re=1&im=2", "re=nan&im=0&scale=3", "re=1&im=2&scale=0", "nonsense"])
def test_load_falls_back_to_default(session, token):
    session.load("re=-0.8&im=0.2&scale=1400")
    assert session.load(token) == session.default_view
    assert is_valid(session.view)


def test_drag_replaces_view(session):
    view = session.drag((5, 5), (10, 10))
    assert view == ViewState(Complex(-2.0, 0.5), 70.0)
    assert session.view is view
    assert session.token() == "re=-2.0&im=0.5&scale=70.0"
    assert session.zoom_factor() == pytest.approx(7.0)


@pytest.mark.parametrize("end", [(5, 19), (1, 19)])
def test_degenerate_drag_falls_back_to_default(session, end):
    session.drag((5, 5), (10, 10))
    assert session.drag((5, 5), end) == session.default_view


def test_reset(session):
    session.drag((5, 5), (10, 10))
    assert session.reset() == default_view_state(35, 20)


def test_render_uses_session_settings():
    session = ViewSession(35, 20, max_iterations=40, palette=HuePalette(inside_color=(9, 9, 9)))
    buffer = session.render()
    assert (buffer.width, buffer.height) == (35, 20)
    assert buffer.pixel(17, 10) == (9, 9, 9, 255)

    again = session.render(out=buffer)
    assert again is not buffer


def test_rejects_bad_construction():
    with pytest.raises(ValueError):
        ViewSession(0, 20)
    with pytest.raises(ValueError):
        ViewSession(35, 20, max_iterations=-1)
