"""
Small shared utilities.
"""
from __future__ import annotations

import keyword
import time
from contextlib import contextmanager
from typing import Generator


@contextmanager
def timer() -> Generator[dict, None, None]:
    """Record elapsed wall-clock milliseconds of a finder round trip."""
    result: dict = {}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["elapsed_ms"] = int((time.perf_counter() - start) * 1000)


def is_parameter_name(name: str) -> bool:
    """True when *name* can be used as a Python parameter name."""
    return name.isidentifier() and not keyword.iskeyword(name)
