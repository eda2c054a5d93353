"""Logging configuration for lanclip CLI."""
import logging

# Third-party loggers that are chatty at DEBUG: websockets logs every
# frame, PIL logs every image plugin it imports.
NOISY_LOGGERS: dict[str, int] = {
    "websockets": logging.INFO,
    "PIL": logging.INFO,
}


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr, DEBUG when verbose and WARNING otherwise.

    The loggers in NOISY_LOGGERS never go below their listed level.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    for name, floor in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, floor))
