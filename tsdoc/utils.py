"""General purpose utility functions."""
import sys
from typing import NoReturn


def error(msg: str, *args: object) -> NoReturn:
    if args:
        msg = msg%args
    print(msg, file=sys.stderr)
    sys.exit(1)
