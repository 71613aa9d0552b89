"""Encoding form data as URL-encoded text or multipart bodies."""

from __future__ import annotations

import math
import os
import secrets
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from curlkit.types import FormFile, FormValue

_Pair = Tuple[str, str]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    number = Decimal(repr(value)).normalize()
    exponent = number.adjusted()
    if -4 <= exponent < 6:
        return format(number, "f")
    return format(value, f".{len(number.as_tuple().digits) - 1}e")


def _format(value: Any) -> str:
    """Render a value as it appears in a form."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (list, tuple, bytes, bytearray)):
        return "[" + " ".join(_format(item) for item in value) + "]"
    if isinstance(value, Mapping):
        entries = sorted(value.items(), key=lambda entry: str(entry[0]))
        return "map[" + " ".join(f"{_format(k)}:{_format(v)}" for k, v in entries) + "]"
    return str(value)


def _expand(key: str, value: Any, *, int_lists: bool, map_lists: bool) -> Optional[List[_Pair]]:
    """Flatten one entry into name/value pairs, or None if unsupported."""
    if isinstance(value, (str, float)) or _is_int(value):
        return [(key, _format(value))]
    if isinstance(value, Mapping):
        return [(f"{key}[{k}]", _format(v)) for k, v in value.items()]
    if isinstance(value, (list, tuple)):
        if all(isinstance(item, str) for item in value):
            return [(f"{key}[]", item) for item in value]
        if int_lists and all(_is_int(item) for item in value):
            return [(f"{key}[]", str(item)) for item in value]
        if map_lists and all(isinstance(item, Mapping) for item in value):
            return [
                (f"{key}[{index}][{k}]", _format(v))
                for index, item in enumerate(value)
                for k, v in item.items()
            ]
    return None


def _quote(name: str) -> str:
    return name.replace("\\", "\\\\").replace('"', '\\"')


class _MultipartWriter:
    def __init__(self) -> None:
        self.boundary = secrets.token_hex(30)
        self.content_type = f"multipart/form-data; boundary={self.boundary}"
        self._parts: List[bytes] = []

    def _add(self, disposition: str, content: bytes, file: bool = False) -> None:
        head = f"--{self.boundary}\r\nContent-Disposition: {disposition}\r\n"
        if file:
            head += "Content-Type: application/octet-stream\r\n"
        self._parts.append(head.encode() + b"\r\n" + content)

    def write_field(self, name: str, value: str) -> None:
        self._add(f'form-data; name="{_quote(name)}"', value.encode())

    def write_file(self, field: str, filename: str, content: bytes) -> None:
        self._add(f'form-data; name="{_quote(field)}"; filename="{_quote(filename)}"', content, True)

    def finish(self) -> bytes:
        return b"\r\n".join(self._parts + [f"--{self.boundary}--\r\n".encode()])


def encode_url_form(form: Mapping[str, FormValue]) -> str:
    """URL-encode FormValue entries, sorted by name; TypeError if unsupported."""
    pairs: List[_Pair] = []
    for key, item in form.items():
        expanded = _expand(key, item.value, int_lists=True, map_lists=False)
        if expanded is None:
            raise TypeError(f"unsupported value type for key {key}")
        pairs.extend(expanded)
    return urlencode(sorted(pairs, key=lambda pair: pair[0]))


def encode_multipart_form(form: Mapping[str, FormValue]) -> Tuple[bytes, str]:
    """Return a multipart body and its Content-Type for FormValue entries."""
    writer = _MultipartWriter()
    for key, item in form.items():
        if item.is_file:
            content = Path(os.fspath(item.value)).read_bytes()
            writer.write_file(item.field_name, item.file_name, content)
            continue
        expanded = _expand(key, item.value, int_lists=False, map_lists=False)
        if expanded is None:
            raise TypeError(f"unsupported multipart value type for key {key}")
        for name, text in expanded:
            writer.write_field(name, text)
    return writer.finish(), writer.content_type


def encode_url_form_values(form: Mapping[str, Any]) -> str:
    """URL-encode plain values, sorted by name, skipping FormFile entries."""
    pairs: List[_Pair] = []
    for key, value in form.items():
        if isinstance(value, FormFile):
            continue
        expanded = _expand(key, value, int_lists=True, map_lists=True)
        if expanded is None:
            raise TypeError(f"unsupported type for key {key}")
        pairs.extend(expanded)
    return urlencode(sorted(pairs, key=lambda pair: pair[0]))


def encode_multipart_form_values(form: Mapping[str, Any]) -> Tuple[bytes, str]:
    """Return a multipart body and its Content-Type for values and FormFiles."""
    writer = _MultipartWriter()
    for key, value in form.items():
        if isinstance(value, FormFile):
            content = Path(os.fspath(value.path)).read_bytes()
            writer.write_file(value.resolved_field(key), value.resolved_filename(), content)
            continue
        expanded = _expand(key, value, int_lists=False, map_lists=False)
        if expanded is None:
            raise TypeError(f"unsupported multipart type for key {key}")
        for name, text in expanded:
            writer.write_field(name, text)
    return writer.finish(), writer.content_type


def has_file(form: Mapping[str, Any]) -> bool:
    """Return True if any entry is a file."""
    return any(
        isinstance(value, FormFile) or (isinstance(value, FormValue) and value.is_file)
        for value in form.values()
    )