import logging
import sys

LOG_FORMAT = "[%(levelname)s] %(message)s"

def setup_logging(debug: bool = False) -> None:
    """Configure root logging for command line use."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
