# sfflow/errors.py
from __future__ import annotations

from pathlib import Path
from typing import Union


class FlowError(Exception):
    """Base class for every error raised by sfflow."""


class FlowRootError(FlowError):
    """The decoded XML has no <Flow> root element."""


class FlowParseError(FlowError):
    """The XML decoder rejected the text. The decoder error is kept as __cause__."""


class FlowFileNotFoundError(FlowError, FileNotFoundError):
    """A Flow file (or the directory it should be written to) does not exist."""

    def __init__(self, message: str, path: Union[str, Path]):
        super().__init__(message)
        self.path = path


class FlowPermissionError(FlowError, PermissionError):
    """A Flow file could not be read or written for lack of permission."""

    def __init__(self, message: str, path: Union[str, Path]):
        super().__init__(message)
        self.path = path


class SchemaConfigError(FlowError, ValueError):
    """A schema table mapping does not match the expected layout."""
