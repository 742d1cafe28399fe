from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--mode", "image", "--width", "280", "--height", "160"]
SEAHORSE_DRAG = ["--drag", "100", "50", "140", "90"]


@dataclass
class Expected:
    path: Path


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Expected]
    clean: list[Path] | None = None

    def full_args(self) -> list[str]:
        return ["python", "explore.py", *self.args]


EXAMPLES: list[Example] = [
    Example(
        name="default",
        args=[*BASE_ARGS, "--output", str(EXAMPLES_ROOT / "default" / "full-set.png")],
        expected=[Expected(EXAMPLES_ROOT / "default" / "full-set.png")],
        clean=[EXAMPLES_ROOT / "default"],
    ),
    Example(
        name="max-iterations",
        args=[*BASE_ARGS, "--max-iterations", "1000", "--output", str(EXAMPLES_ROOT / "max-iterations" / "high-iterations.png")],
        expected=[Expected(EXAMPLES_ROOT / "max-iterations" / "high-iterations.png")],
        clean=[EXAMPLES_ROOT / "max-iterations"],
    ),
    Example(
        name="state",
        args=[
            *BASE_ARGS,
            "--state",
            "re=-0.8&im=0.2&scale=1400",
            "--output",
            str(EXAMPLES_ROOT / "state" / "restored.png"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "state" / "restored.png")],
        clean=[EXAMPLES_ROOT / "state"],
    ),
    Example(
        name="drag",
        args=[*BASE_ARGS, *SEAHORSE_DRAG, "--output", str(EXAMPLES_ROOT / "drag" / "zoomed.png")],
        expected=[Expected(EXAMPLES_ROOT / "drag" / "zoomed.png")],
        clean=[EXAMPLES_ROOT / "drag"],
    ),
    Example(
        name="state-file",
        args=[
            *BASE_ARGS,
            *SEAHORSE_DRAG,
            "--state-file",
            str(EXAMPLES_ROOT / "state-file" / "view.txt"),
            "--output",
            str(EXAMPLES_ROOT / "state-file" / "zoomed.png"),
        ],
        expected=[
            Expected(EXAMPLES_ROOT / "state-file" / "zoomed.png"),
            Expected(EXAMPLES_ROOT / "state-file" / "view.txt"),
        ],
        clean=[EXAMPLES_ROOT / "state-file"],
    ),
    Example(
        name="gif",
        args=[
            "--mode",
            "gif",
            "--width",
            "280",
            "--height",
            "160",
            *SEAHORSE_DRAG,
            "--drag",
            "120",
            "60",
            "160",
            "100",
            "--output",
            str(EXAMPLES_ROOT / "gif" / "history.gif"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "gif" / "history.gif")],
        clean=[EXAMPLES_ROOT / "gif"],
    ),
    Example(
        name="colormap",
        args=[*BASE_ARGS, "--colormap", "inferno", "--output", str(EXAMPLES_ROOT / "colormap" / "inferno.png")],
        expected=[Expected(EXAMPLES_ROOT / "colormap" / "inferno.png")],
        clean=[EXAMPLES_ROOT / "colormap"],
    ),
    Example(
        name="hue",
        args=[*BASE_ARGS, "--hue-offset", "0.05", "--hue-span", "0.6", "--output", str(EXAMPLES_ROOT / "hue" / "warm.png")],
        expected=[Expected(EXAMPLES_ROOT / "hue" / "warm.png")],
        clean=[EXAMPLES_ROOT / "hue"],
    ),
    Example(
        name="format",
        args=[*BASE_ARGS, "--format", "webp", "--output", str(EXAMPLES_ROOT / "format" / "custom.webp")],
        expected=[Expected(EXAMPLES_ROOT / "format" / "custom.webp")],
        clean=[EXAMPLES_ROOT / "format"],
    ),
    Example(
        name="inside-color",
        args=[*BASE_ARGS, "--inside-color", "#0a3ba0", "--output", str(EXAMPLES_ROOT / "inside-color" / "custom-interior.png")],
        expected=[Expected(EXAMPLES_ROOT / "inside-color" / "custom-interior.png")],
        clean=[EXAMPLES_ROOT / "inside-color"],
    ),
    Example(
        name="verbose",
        args=[*BASE_ARGS, "--verbose", "--output", str(EXAMPLES_ROOT / "verbose" / "diagnostic.png")],
        expected=[Expected(EXAMPLES_ROOT / "verbose" / "diagnostic.png")],
        clean=[EXAMPLES_ROOT / "verbose"],
    ),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _prepare(example: Example) -> None:
    clean = example.clean or []
    _ensure_clean(clean)
    for expected in example.expected:
        expected.path.parent.mkdir(parents=True, exist_ok=True)


def _verify(example: Example) -> None:
    for expected in example.expected:
        if not expected.path.is_file():
            raise RuntimeError(f"Expected file {expected.path} was not created")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _prepare(example)
        subprocess.run(example.full_args(), check=True)
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
