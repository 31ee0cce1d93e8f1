import os
import re
import sys
import warnings
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path

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

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from mandelbrot_render import (
    EncodingError,
    new_buffer,
    parse_complex,
    parse_pair,
    render,
    render_bands,
    write_image,
)

EXAMPLE = "Example: {prog} mandelbrot.png 1000x750 -1.20,0.35 -1,0.20"


class UsageParser(ArgumentParser):
    """Argument parser that reports misuse with an example and exit status 1."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Corner points like -1.20,0.35 or -inf,0 are positionals, not option
        # flags. Relies on argparse internals; "--" before FILE works regardless.
        self._negative_number_matcher = re.compile(r"^-(\.?\d|inf|nan)", re.IGNORECASE)

    def error(self, message):
        self.print_usage(sys.stderr)
        sys.stderr.write(EXAMPLE.format(prog=self.prog) + "\n")
        self.exit(1, f"{self.prog}: error: {message}\n")


@dataclass
class RenderJob:
    output: Path
    bounds: tuple[int, int]
    upper_left: complex
    lower_right: complex


def build_parser():
    parser = UsageParser(
        prog="mandelbrot",
        epilog='Corner points may start with a dash. If one is mistaken for an option, put -- before FILE.',
    )

    parser.add_argument('file', metavar='FILE',
                        help='PNG file to write the grayscale rendering to')

    parser.add_argument('pixels', metavar='PIXELS',
                        help='image size in pixels, e.g. 1000x750')

    parser.add_argument('upper_left', metavar='UPPERLEFT',
                        help='complex point at the upper-left corner, e.g. -1.20,0.35')

    parser.add_argument('lower_right', metavar='LOWERRIGHT',
                        help='complex point at the lower-right corner, e.g. -1,0.20')

    parser.add_argument('--backend', choices=['tensorflow', 'threads'], default='tensorflow',
                        help='"tensorflow" evaluates the whole grid at once; "threads" is a reference path that '
                             'evaluates pixel by pixel in pure Python across worker threads. It shares the GIL, '
                             'so --workers does not speed it up.')

    parser.add_argument('--workers', type=int, dest='workers', metavar='WORKERS', default=None,
                        help='number of row bands for the threads backend (default: CPU count)')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_job(opt) -> RenderJob:
    """Turn parsed arguments into a render job, exiting on malformed values."""

    bounds = parse_pair(opt.pixels, 'x', int)
    if bounds is None or bounds[0] <= 0 or bounds[1] <= 0:
        sys.exit(f"Error parsing image dimensions: {opt.pixels!r}")

    upper_left = parse_complex(opt.upper_left)
    if upper_left is None:
        sys.exit(f"Error parsing upper left corner point: {opt.upper_left!r}")

    lower_right = parse_complex(opt.lower_right)
    if lower_right is None:
        sys.exit(f"Error parsing lower right corner point: {opt.lower_right!r}")

    return RenderJob(
        output=Path(opt.file).expanduser(),
        bounds=bounds,
        upper_left=upper_left,
        lower_right=lower_right,
    )


def select_device() -> str:
    """Use the first GPU TensorFlow can see, otherwise the CPU."""

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        # Memory growth can only be changed before the GPUs are initialized.
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    job = resolve_job(opt)
    width, height = job.bounds
    log("Rendering %dx%d pixels from %s to %s" % (width, height, job.upper_left, job.lower_right))

    pixels = new_buffer(job.bounds)
    if opt.backend == 'threads':
        render_bands(pixels, job.bounds, job.upper_left, job.lower_right, workers=opt.workers)
    else:
        log("TensorFlow version: %s" % tf.__version__)
        render(pixels, job.bounds, job.upper_left, job.lower_right, device=select_device())

    try:
        write_image(job.output, pixels, job.bounds)
    except EncodingError as exc:
        sys.exit(f"Error writing PNG file: {exc}")

    log("Wrote %s" % job.output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
