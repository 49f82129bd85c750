import asyncio
import logging
import sys
from typing import List, Optional

from incjc.builder import IncrementalBuilder
from incjc.config import load_config
from incjc.exceptions import IncJCError
from incjc.log import setup_logging

RETVAL_OK = 0
RETVAL_COMPILATION_ERROR = 1
RETVAL_UNEXPECTED_FAILURE = 2
RETVAL_ILLEGAL_ARGS = 3

USAGE = "Usage: incjc <classpath> <sourcepath>"

logger = logging.getLogger(__name__)

async def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the incremental compiler.

    Args:
        argv: Arguments without the program name, defaults to ``sys.argv[1:]``

    Returns:
        int: Process exit code
    """
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2:
        print(USAGE, file=sys.stderr)
        return RETVAL_ILLEGAL_ARGS
    classpath, source_dir = args

    try:
        config = load_config()
        setup_logging(config.debug)
        result = await IncrementalBuilder(config).compile(classpath, source_dir)
    except (IncJCError, OSError) as e:
        setup_logging()
        logger.error(f"FAILURE: {e}", exc_info=True)
        return RETVAL_UNEXPECTED_FAILURE
    except Exception as e:
        setup_logging()
        logger.error(f"FAILURE: unexpected error: {e}", exc_info=True)
        return RETVAL_UNEXPECTED_FAILURE

    return RETVAL_OK if result.success else RETVAL_COMPILATION_ERROR

def run() -> None:
    sys.exit(asyncio.run(main()))

if __name__ == "__main__":
    run()
