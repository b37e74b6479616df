from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Iterable, Mapping

from loguru import logger

from stack_safe.algorithms import ackermann, triangular


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records from the library to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(exception=record.exc_info).log(level, record.getMessage())


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")
    library_logger = logging.getLogger("stack_safe")
    library_logger.handlers = [InterceptHandler()]
    library_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    library_logger.propagate = False


def non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return value


def _run(impls: Mapping[str, Callable[..., int]], impl: str, *args: int) -> int:
    fn = impls[impl]
    logger.debug("Running {} with {}", fn.__qualname__, args)
    print(fn(*args))
    return 0


def handle_ackermann(args: argparse.Namespace) -> int:
    return _run(ackermann.IMPLEMENTATIONS, args.impl, args.m, args.n)


def handle_triangular(args: argparse.Namespace) -> int:
    return _run(triangular.IMPLEMENTATIONS, args.impl, args.n)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stack-safe",
        description="Evaluate example recursive functions on the stack-safe driver",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log driver summaries to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ack_parser = subparsers.add_parser("ackermann", help="Compute A(m, n)")
    ack_parser.add_argument("impl", choices=sorted(ackermann.IMPLEMENTATIONS))
    ack_parser.add_argument("m", type=non_negative_int)
    ack_parser.add_argument("n", type=non_negative_int)
    ack_parser.set_defaults(func=handle_ackermann)

    tri_parser = subparsers.add_parser("triangular", help="Compute 0 + 1 + ... + n")
    tri_parser.add_argument("impl", choices=sorted(triangular.IMPLEMENTATIONS))
    tri_parser.add_argument("n", type=non_negative_int)
    tri_parser.set_defaults(func=handle_triangular)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    _configure_logging(args.verbose)
    try:
        return args.func(args)
    except RecursionError as exc:
        print(f"Error: {exc} (try a stack-safe implementation)", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.opt(exception=exc).debug("Command failed")
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
