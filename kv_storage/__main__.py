"""Interface for ``python -m kv_storage``."""

from __future__ import annotations

import logging
from argparse import ArgumentParser
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence

from ._version import version
from .config import StorageConfig


__all__ = ["main"]


def main(args: Sequence[str] | None = None) -> None:
    """Argument parser for the CLI."""
    parser = ArgumentParser(prog="kv_storage")
    _ = parser.add_argument("-v", "--version", action="version", version=version)
    _ = parser.add_argument(
        "--show-config", action="store_true", help="print the storage configuration resolved from the environment"
    )
    _ = parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    parsed = parser.parse_args(args)

    if parsed.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s [%(name)s]: %(message)s")

    if parsed.show_config:
        print(StorageConfig.load().model_dump_json(indent=2))  # noqa: T201


if __name__ == "__main__":
    main()
