import os
import sys

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])

# TensorFlow reads this when it is first imported (tensor mode only)
if not _cli_verbose and os.environ.get("TF_CPP_MIN_LOG_LEVEL") is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import logging
import time
import warnings
from argparse import ArgumentParser
from pathlib import Path
from typing import Callable, Optional, TypeVar

import numpy as np
import PIL.Image

from mandelbrot import (
    DEFAULT_LIMIT,
    DEFAULT_WORKERS,
    ImageBounds,
    RenderParameters,
    ViewRegion,
    render_image,
)

T = TypeVar("T")

USAGE_EXAMPLE = "mandel.py -- mandel.png 1000x750 -1.20,0.35 -1,0.20 fast"


def parse_pair(text: str, separator: str, convert: Callable[[str], T]) -> Optional[tuple[T, T]]:
    """Parse ``text`` as a pair like ``"400x600"`` or ``"1.0,0.5"``.

    ``text`` must be ``<left><separator><right>`` where both halves are accepted
    by ``convert``. Only the first separator splits. Returns ``None`` when the
    text does not have that form.
    """

    index = text.find(separator)
    if index < 0:
        return None
    try:
        return convert(text[:index]), convert(text[index + 1:])
    except ValueError:
        return None


def parse_complex(text: str) -> Optional[complex]:
    """Parse a pair of floats separated by a comma as a complex number."""

    pair = parse_pair(text, ",", float)
    if pair is None:
        return None
    re, im = pair
    return complex(re, im)


def build_parser():
    parser = ArgumentParser(
        prog="mandelbrot",
        description="Render a grayscale image of the Mandelbrot set.",
        epilog=f"Example: {USAGE_EXAMPLE}  ('--' keeps negative coordinates from reading as options)",
    )

    parser.add_argument('file', metavar='FILE', help='image file to write')
    parser.add_argument('pixels', metavar='PIXELS', help='image size as WIDTHxHEIGHT, e.g. 1000x750')
    parser.add_argument('upper_left', metavar='UPPERLEFT',
                        help='complex point RE,IM at the upper left corner of the image')
    parser.add_argument('lower_right', metavar='LOWERRIGHT',
                        help='complex point RE,IM at the lower right corner of the image')
    parser.add_argument('mode', metavar='MODE', nargs='?', default='fast',
                        help='"fast" renders row bands in parallel, "slow" renders sequentially, '
                             '"tensor" vectorizes on TensorFlow. Default: "fast".')

    parser.add_argument('--limit', type=int,
                        dest='limit', help='maximum number of iterations per point (at most 255 for exact gray levels)',
                        metavar='LIMIT', default=DEFAULT_LIMIT)

    parser.add_argument('--workers', type=int,
                        dest='workers', help='number of row bands rendered concurrently in fast mode',
                        metavar='WORKERS', default=DEFAULT_WORKERS)

    parser.add_argument('--format', type=str,
                        dest='format', help='image file format. Can be any extension supported by Pillow. '
                                            'Default: taken from FILE, else "png".',
                        metavar='FORMAT', default=None)

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging of render progress.')

    return parser


def resolve_render_parameters(opt, parser: ArgumentParser) -> RenderParameters:
    size = parse_pair(opt.pixels, "x", int)
    if size is None:
        parser.error(f"error parsing image dimensions '{opt.pixels}'.")
    if size[0] <= 0 or size[1] <= 0:
        parser.error("image dimensions must be positive.")

    upper_left = parse_complex(opt.upper_left)
    if upper_left is None:
        parser.error(f"error parsing upper left corner point '{opt.upper_left}'.")
    lower_right = parse_complex(opt.lower_right)
    if lower_right is None:
        parser.error(f"error parsing lower right corner point '{opt.lower_right}'.")

    if opt.limit <= 0:
        parser.error("--limit must be positive.")
    if opt.workers <= 0:
        parser.error("--workers must be positive.")

    region = ViewRegion(upper_left=upper_left, lower_right=lower_right)
    if not region.is_oriented:
        warnings.warn(
            "UPPERLEFT should lie left of and above LOWERRIGHT; the image will be mirrored or empty.",
            UserWarning,
            stacklevel=2,
        )

    return RenderParameters(
        bounds=ImageBounds(*size),
        region=region,
        limit=opt.limit,
        workers=opt.workers,
        mode=opt.mode,
    )


def resolve_output_path(opt, parser: ArgumentParser) -> tuple[Path, str]:
    output_path = Path(opt.file).expanduser()
    if output_path.exists() and output_path.is_dir():
        parser.error("FILE must point to a file, not a directory.")

    suffix = output_path.suffix.lower().lstrip(".")
    image_format = (opt.format or suffix or "png").lower().lstrip(".")
    if suffix:
        if opt.format and suffix != image_format:
            parser.error(f"FILE extension .{suffix} does not match --format {image_format}.")
    else:
        output_path = output_path.with_suffix(f".{image_format}")
    return output_path.resolve(), image_format


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def write_image(output_path: Path, pixels: np.ndarray, bounds: ImageBounds, image_format: str = "png") -> None:
    """Write the grayscale buffer ``pixels`` of size ``bounds`` to ``output_path``."""

    image = PIL.Image.fromarray(pixels.reshape(bounds.height, bounds.width))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=_pil_format_name(image_format))


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)
    if VERBOSE:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    params = resolve_render_parameters(opt, parser)
    output_path, image_format = resolve_output_path(opt, parser)

    log("Rendering {0}x{1} from {2} to {3} ({4} mode)".format(
        params.bounds.width, params.bounds.height,
        params.region.upper_left, params.region.lower_right, params.mode,
    ))
    started = time.perf_counter()
    result = render_image(params)
    log("Rendered in {0:.2f}s".format(time.perf_counter() - started))

    try:
        write_image(output_path, result.pixels, result.bounds, image_format)
    except (OSError, ValueError, KeyError) as exc:
        # Pillow raises KeyError/ValueError for unknown formats
        print(f"error writing image file {output_path}: {exc}", file=sys.stderr)
        return 1

    log("Wrote {0}".format(output_path))
    return 0


if __name__ == '__main__':
    sys.exit(main())
