import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(verbose: bool = False, level: str = "WARNING") -> None:
    """Configure root logging once for the CLI; --verbose forces DEBUG."""
    resolved = logging.DEBUG if verbose else getattr(logging, level, logging.WARNING)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
