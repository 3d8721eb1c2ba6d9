"""Logging setup for the termsync command line."""

from __future__ import annotations

import logging

# Transport libraries log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Initialise the root logger for a CLI run.

    ``verbose`` selects DEBUG for termsync and lets the transport libraries log
    their requests; otherwise the root logger runs at INFO and those libraries are
    limited to warnings. Pass ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    transport_level = logging.NOTSET if verbose else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
