import os
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")

import PIL.Image
import imageio

from mandelview import (
    ColormapPalette,
    HuePalette,
    RenderBuffer,
    ViewSession,
    parse_hex_color,
)
from mandelview.verbosity import log, set_verbose

set_verbose(_cli_verbose)
log("TensorFlow version: %s" % tf.__version__)

from argparse import ArgumentParser

DEVICE = '/CPU:0'
VALID_MODES = ("image", "gif", "interactive")


@dataclass(frozen=True)
class ExploreConfig:
    modes: tuple[str, ...]
    width: int
    height: int
    max_iterations: int
    image_path: Path | None
    gif_path: Path | None
    image_format: str
    state_file: Path | None
    drags: tuple[tuple[float, float, float, float], ...]


def build_parser():
    parser = ArgumentParser(description='Render and explore the Mandelbrot set by dragging zoom rectangles.')

    parser.add_argument('--width', type=int,
                        dest='width', help='width of the pixel buffer',
                        metavar='WIDTH', default=700)

    parser.add_argument('--height', type=int,
                        dest='height', help='height of the pixel buffer',
                        metavar='HEIGHT', default=400)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='iteration cap; points surviving it are drawn in the inside colour',
                        metavar='MAX_ITERATIONS', default=255)

    parser.add_argument('--state', type=str, dest='state',
                        help='saved view token, e.g. "re=-2.5&im=1.0&scale=200.0". Invalid tokens fall back to the full set.',
                        metavar='TOKEN')

    parser.add_argument('--state-file', type=str, dest='state_file',
                        help='file holding the view token; read on start and rewritten after every render.',
                        metavar='PATH')

    parser.add_argument('--reset', action='store_true',
                        help='ignore any saved state and start from the full set.')

    parser.add_argument('--drag', type=float, nargs=4, action='append', dest='drags',
                        metavar=('X0', 'Y0', 'X1', 'Y1'),
                        help='zoom into the rectangle dragged from pixel (X0, Y0) to (X1, Y1). May be repeated.')

    parser.add_argument('--mode', dest='modes', action='append', metavar='MODE',
                        help='Output modes. May be repeated. Choices: image, gif, interactive.')

    parser.add_argument('--output', dest='output', type=str,
                        help='Destination for the image/gif, or a directory when both are requested.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for image output. Any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('--colormap', type=str,
                        dest='colormap', help='matplotlib colormap to use instead of the hue sweep (e.g. "twilight_shifted")',
                        metavar='COLORMAP')

    parser.add_argument('--invert', action='store_true', help='Invert the selected colormap.')
    parser.add_argument('--hue-offset', type=float, default=0.58, help='Hue at the lowest escape value.')
    parser.add_argument('--hue-span', type=float, default=0.25, help='Hue range covered by the escape values.')
    parser.add_argument('--inside-color', type=str, default='#000000', help='Hex color for points inside the Mandelbrot set.')

    parser.add_argument('--print-state', action='store_true',
                        help='print the final view token to stdout.')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow diagnostics and render timings.')

    return parser


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def resolve_config(opt, parser: ArgumentParser) -> ExploreConfig:
    modes: list[str] = []
    for mode in opt.modes or ["image"]:
        if mode not in VALID_MODES:
            parser.error(f"Unknown mode '{mode}'. Valid choices: {', '.join(VALID_MODES)}.")
        if mode not in modes:
            modes.append(mode)

    if opt.width <= 0 or opt.height <= 0:
        parser.error("--width and --height must be positive.")
    if opt.max_iterations < 0:
        parser.error("--max-iterations must not be negative.")

    image_format = (opt.format or "png").lower().lstrip(".") or "png"

    file_modes = [mode for mode in modes if mode in {"gif", "image"}]
    gif_path: Path | None = None
    image_path: Path | None = None

    if not file_modes:
        if opt.output:
            parser.error("--output is only valid when gif or image modes are requested.")
    elif len(file_modes) == 1:
        mode = file_modes[0]
        if opt.output:
            output_path = Path(opt.output).expanduser()
            if output_path.exists() and output_path.is_dir():
                parser.error("--output must point to a file, not a directory, when a single file mode is active.")
            if mode == "gif":
                if output_path.suffix:
                    if output_path.suffix.lower() != ".gif":
                        parser.error("GIF outputs must end with .gif.")
                else:
                    output_path = output_path.with_suffix(".gif")
                gif_path = output_path.resolve()
            else:
                expected_suffix = f".{image_format}"
                if output_path.suffix:
                    if output_path.suffix.lower() != expected_suffix:
                        parser.error(f"--output extension {output_path.suffix} does not match --format {image_format}.")
                else:
                    output_path = output_path.with_suffix(expected_suffix)
                image_path = output_path.resolve()
        elif mode == "gif":
            gif_path = Path("explore.gif").resolve()
        else:
            image_path = Path(f"view.{image_format}").resolve()
    else:
        base_dir = Path(opt.output).expanduser() if opt.output else Path.cwd()
        if base_dir.exists() and not base_dir.is_dir():
            parser.error("--output must be a directory when both gif and image modes are active.")
        gif_path = (base_dir / "explore.gif").resolve()
        image_path = (base_dir / f"view.{image_format}").resolve()

    if "gif" in modes and not opt.drags:
        parser.error("gif mode needs at least one --drag to animate.")

    return ExploreConfig(
        modes=tuple(modes),
        width=opt.width,
        height=opt.height,
        max_iterations=opt.max_iterations,
        image_path=image_path,
        gif_path=gif_path,
        image_format=image_format,
        state_file=Path(opt.state_file).expanduser().resolve() if opt.state_file else None,
        drags=tuple(tuple(drag) for drag in opt.drags or ()),
    )


def build_palette(opt):
    try:
        inside_rgb = parse_hex_color(opt.inside_color)
    except ValueError:
        print(f"Invalid inside_color '{opt.inside_color}', defaulting to black.")
        inside_rgb = (0, 0, 0)

    if opt.colormap:
        return ColormapPalette(opt.colormap, inside_color=inside_rgb, invert=bool(opt.invert))
    return HuePalette(hue_offset=opt.hue_offset, hue_span=opt.hue_span, inside_color=inside_rgb)


def read_state(state_file: Path | None) -> str | None:
    if state_file is None or not state_file.is_file():
        return None
    return state_file.read_text(encoding="utf-8").strip()


def write_state(state_file: Path | None, token: str) -> None:
    if state_file is None:
        return
    state_file.parent.mkdir(parents=True, exist_ok=True)
    state_file.write_text(token + "\n", encoding="utf-8")


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    pil_format = _pil_format_name(image_format)
    if pil_format == "JPEG" and image.mode == "RGBA":
        image = image.convert("RGB")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)


def write_gif(gif_path: Path, frames: list[RenderBuffer], duration: float = 0.5) -> None:
    """Write every buffer in ``frames`` as one frame of a looping GIF."""

    gif_path.parent.mkdir(parents=True, exist_ok=True)
    with imageio.get_writer(str(gif_path), mode='I', duration=duration, loop=0) as writer:
        for frame in frames:
            writer.append_data(frame.pixels)


class InteractiveExplorer:
    """Matplotlib window: drag a rectangle to zoom, press "Reset zoom" to start over."""

    def __init__(self, session: ViewSession, state_file: Path | None = None) -> None:
        import matplotlib.pyplot as plt
        from matplotlib.widgets import Button, RectangleSelector

        self.session = session
        self.state_file = state_file
        self.buffer = session.render()
        write_state(state_file, session.token())

        width, height = session.width, session.height
        self.fig, self.ax = plt.subplots(figsize=(width / 100, height / 100 + 0.6), dpi=100)
        if self.fig.canvas.manager:
            self.fig.canvas.manager.set_window_title('Mandelbrot explorer')
        self.fig.subplots_adjust(left=0, right=1, top=1, bottom=0.6 / (height / 100 + 0.6))
        self.ax.set_axis_off()
        # Data coordinates equal buffer pixel coordinates.
        self.image = self.ax.imshow(self.buffer.pixels, extent=(0, width, height, 0), interpolation='nearest')

        self.selector = RectangleSelector(
            self.ax,
            self.on_select,
            useblit=True,
            button=[1],
            interactive=False,
            props=dict(edgecolor='grey', fill=False, linestyle='--'),
        )
        button_ax = self.fig.add_axes([0.02, 0.02, 0.16, 0.06])
        self.reset_button = Button(button_ax, 'Reset zoom')
        self.reset_button.on_clicked(self.on_reset)
        self.status_text = self.fig.text(0.2, 0.04, '', fontsize=9, va='center')
        self._update_status()

    def _update_status(self) -> None:
        self.status_text.set_text(f"{self.session.token()}  (zoom x{self.session.zoom_factor():.3g})")

    def redraw(self) -> None:
        self.status_text.set_text('Rendering...')
        self.fig.canvas.draw_idle()
        self.fig.canvas.flush_events()
        self.buffer = self.session.render(out=self.buffer)
        self.image.set_data(self.buffer.pixels)
        write_state(self.state_file, self.session.token())
        self._update_status()
        self.fig.canvas.draw_idle()

    def on_select(self, eclick: Any, erelease: Any) -> None:
        if eclick.xdata is None or erelease.xdata is None:
            return
        self.session.drag((eclick.xdata, eclick.ydata), (erelease.xdata, erelease.ydata))
        self.redraw()

    def on_reset(self, event: Any) -> None:
        self.session.reset()
        self.redraw()

    def show(self) -> None:
        import matplotlib.pyplot as plt

        plt.show()


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)
    config = resolve_config(opt, parser)

    set_verbose(opt.verbose)

    palette = build_palette(opt)
    session = ViewSession(
        config.width,
        config.height,
        max_iterations=config.max_iterations,
        palette=palette,
        device=DEVICE,
    )

    if not opt.reset:
        token = opt.state if opt.state is not None else read_state(config.state_file)
        session.load(token)
    log("Starting view: %s" % session.token())

    frames: list[RenderBuffer] = []
    buffer: RenderBuffer | None = None
    if "gif" in config.modes:
        buffer = session.render()
        frames.append(buffer)

    for i, (x0, y0, x1, y1) in enumerate(config.drags):
        session.drag((x0, y0), (x1, y1))
        log("drag {0}: {1}".format(i, session.token()))
        if "gif" in config.modes:
            buffer = session.render(out=buffer)
            frames.append(buffer)

    if "gif" in config.modes and config.gif_path is not None:
        write_gif(config.gif_path, frames)
        write_state(config.state_file, session.token())

    if "image" in config.modes and config.image_path is not None:
        buffer = buffer if "gif" in config.modes else session.render()
        write_single_image(buffer.to_image(), config.image_path, config.image_format)
        write_state(config.state_file, session.token())

    if "interactive" in config.modes:
        explorer = InteractiveExplorer(session, config.state_file)
        explorer.show()

    if opt.print_state:
        print(session.token())

    return 0


if __name__ == '__main__':
    sys.exit(main())
