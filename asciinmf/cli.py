"""Command line interface for glyph conversion."""

from __future__ import annotations

import argparse
from pathlib import Path

from . import config, converter, output
from .cells import load_image
from .dictionary import GlyphDictionary
from .utils.validation import check_beta


def _beta(value: str) -> float:
    try:
        return check_beta(float(value))
    except ValueError:
        pass
    try:
        return check_beta(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asciinmf",
        description=(
            "Convert an image into monospaced text by factorizing its cells "
            "against a dictionary of glyph bitmaps."
        ),
    )
    parser.add_argument("image", type=Path, help="Path to the source image file.")
    parser.add_argument(
        "-d",
        "--dictionary",
        type=Path,
        required=True,
        help="Glyph dictionary archive (.npz) with the glyph bitmaps and cell size.",
    )
    parser.add_argument(
        "-p",
        "--pseudoinverse",
        action="store_true",
        help="Convert the image using the pseudoinverse of the dictionary.",
    )
    parser.add_argument(
        "--gpu",
        action="store_true",
        help="Run the divergence solver with PyTorch (ignored if -p is set).",
    )
    parser.add_argument(
        "-b",
        "--beta",
        type=_beta,
        default=config.DEFAULT_BETA,
        help=(
            "Beta parameter of the cost function, a number or one of "
            "itakura-saito, kullback-leibler, frobenius "
            f"(ignored if -p is set, default: {config.DEFAULT_BETA})."
        ),
    )
    parser.add_argument(
        "-t",
        "--threshold",
        type=float,
        default=config.DEFAULT_THRESHOLD,
        help=(
            "Threshold for maximum activation values, from 0.0 to 1.0 "
            f"(default: {config.DEFAULT_THRESHOLD})."
        ),
    )
    parser.add_argument(
        "-i",
        "--iterations",
        type=int,
        default=config.DEFAULT_ITERATIONS,
        help=(
            f"Number of iterations, from {config.MIN_ITERATIONS} to "
            f"{config.MAX_ITERATIONS} (ignored if -p is set, "
            f"default: {config.DEFAULT_ITERATIONS})."
        ),
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="Worker threads for the divergence solver (default: one per CPU).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random activation initialization.",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=config.DEFAULT_OUTPUT,
        help=f"Name of the output HTML file (default: {config.DEFAULT_OUTPUT}).",
    )
    parser.add_argument(
        "--text",
        action="store_true",
        help="Print the result to the terminal instead of writing HTML.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Print solver diagnostics (repeat for more detail).",
    )
    return parser


def _output_path(name: str) -> Path:
    path = Path(name)
    if path.suffix.lower() != ".html":
        path = path.with_name(path.name + ".html")
    return path


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not 0.0 <= args.threshold <= 1.0:
        parser.error("--threshold must be from 0.0 to 1.0")
    if not config.MIN_ITERATIONS <= args.iterations <= config.MAX_ITERATIONS:
        parser.error(
            f"--iterations must be from {config.MIN_ITERATIONS} to {config.MAX_ITERATIONS}"
        )
    if args.jobs is not None and args.jobs < 1:
        parser.error("--jobs must be >= 1")

    if not args.dictionary.exists():
        parser.error(f"Dictionary not found: {args.dictionary}")
    try:
        dictionary = GlyphDictionary.load(args.dictionary)
    except (OSError, ValueError) as exc:
        parser.error(f"Cannot load dictionary {args.dictionary}: {exc}")

    if args.pseudoinverse:
        method = "projection"
    elif args.gpu:
        method = "gpu"
    else:
        method = "divergence"

    conversion = config.ConversionConfig(
        method=method,
        beta=args.beta,
        threshold=args.threshold,
        n_iter=args.iterations,
        n_jobs=args.jobs,
        random_state=args.seed,
        verbose=min(args.verbose, 2),
    )

    try:
        image = load_image(str(args.image))
    except OSError:
        print(f"Cannot open file {args.image}")
        return 1

    print("Converting image...")

    def report(progress: int) -> None:
        print(f"{progress}%")

    try:
        grid = converter.convert_image(image, dictionary, conversion, report)
    except Exception as exc:
        print("Cannot convert specified image")
        if args.verbose:
            print(f"{type(exc).__name__}: {exc}")
        return 1

    if args.text:
        print(output.grid_to_text(grid))
        return 0

    output_path = _output_path(args.output)
    print(f"Saving result to {output_path}...")
    output.write_html(grid, output_path)
    print("Done!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
