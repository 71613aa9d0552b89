"""Value types that describe requests and form submissions."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any


@dataclass
class Config:
    """Per-request options."""

    act_name: str = ""


@dataclass
class FormValue:
    """A form entry; for a file, ``value`` holds the file's path."""

    value: Any = None
    is_file: bool = False
    field_name: str = ""
    file_name: str = ""


@dataclass
class FormFile:
    """A file to upload as part of a multipart form."""

    path: Any
    field: str = ""
    file_name: str = ""

    def resolved_field(self, key: str) -> str:
        """Return the field name, falling back to the form key."""
        return self.field or key

    def resolved_filename(self) -> str:
        """Return the file name, falling back to the path's base name."""
        return self.file_name or os.path.basename(os.path.normpath(os.fspath(self.path)))