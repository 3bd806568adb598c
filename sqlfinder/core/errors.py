"""
Exception hierarchy for finder definition and invocation.

  - DefinitionError  -- malformed specification, raised by define_finder
                        before anything is registered
  - ArgumentMismatch -- bad call-time arguments (count, unknown keyword,
                        missing named key)
  - BackendError     -- failures raised by the bundled backend itself;
                        driver / SQLAlchemy errors propagate unmodified
"""
from __future__ import annotations


class FinderError(Exception):
    """Base class for all sqlfinder errors."""


class DefinitionError(FinderError, ValueError):
    pass


class ArgumentMismatch(FinderError, TypeError):
    pass


class BackendError(FinderError, RuntimeError):
    pass
