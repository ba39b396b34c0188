from __future__ import annotations

import json
import re
from typing import Any, Optional
import collections.abc

import yaml

from csfn.csfn_function import Invocation


# --------------------------
# Helpers
# --------------------------

def _norm_text(data: bytes | bytearray | str, *, encoding: Optional[str] = None) -> str:
    if isinstance(data, (bytes, bytearray)):
        enc = encoding or 'utf-8'
        try:
            return data.decode(enc, errors='replace')
        except LookupError:
            # Unknown charset name in the content type
            return data.decode('utf-8', errors='replace')
    if isinstance(data, str):
        return data
    return str(data)


def _encoding_from_content_type(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    m = re.search(r'charset\s*=\s*([^\s;]+)', content_type, re.IGNORECASE)
    if m:
        return m.group(1).strip('"').strip("'")
    return None


def _to_builtin(obj: Any) -> Any:
    # Tuples (key-paths) become lists; mappings become plain dicts
    if isinstance(obj, (list, tuple)):
        return [_to_builtin(x) for x in obj]
    if isinstance(obj, collections.abc.Mapping):
        return {k: _to_builtin(v) for k, v in obj.items()}
    return obj


def detect_format(content_type: Optional[str] = None, data_hint: Optional[str] = None) -> Optional[str]:
    """
    Returns a canonical format name, 'json' or 'yaml'.
    Uses Content-Type first; falls back to simple data sniffing if provided.
    """
    ct = (content_type or "").lower()
    if 'json' in ct:
        return 'json'
    if 'yaml' in ct or 'x-yaml' in ct:
        return 'yaml'

    if data_hint is not None:
        s = data_hint.lstrip()
        if s.startswith('{') or s.startswith('['):
            return 'json'
    return None


def format_for_filename(filename: str) -> Optional[str]:
    lower = filename.lower()
    if lower.endswith('.json'):
        return 'json'
    if lower.endswith('.yaml') or lower.endswith('.yml'):
        return 'yaml'
    return None


# --------------------------
# Public API
# --------------------------

def deserialize(data: bytes | bytearray | str,
                *,
                content_type: Optional[str] = None,
                fmt: Optional[str] = None) -> Any:
    """
    Convert wire data (bytes/string) to plain Python structures.
    Supported fmt: 'json', 'yaml'. If fmt is None, uses content_type, then
    sniffing, then tries YAML (a JSON superset). Text that does not parse
    is returned unchanged.
    """
    enc = _encoding_from_content_type(content_type)
    text = _norm_text(data, encoding=enc)
    f = (fmt or detect_format(content_type, text) or 'yaml')
    if f == 'json':
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Declared JSON but content is YAML-like
            try:
                return yaml.safe_load(text)
            except yaml.YAMLError:
                return text
    if f == 'yaml':
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError:
            return text
    return text


def serialize(value: Any,
              *,
              fmt: str,
              pretty: bool = True) -> str:
    """
    Convert a plain Python value into text.
    - fmt: 'json' | 'yaml'
    """
    f = (fmt or '').lower()
    built = _to_builtin(value)
    if f == 'json':
        return json.dumps(built, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(built, sort_keys=False)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


def dumps_invocation(invocation: Invocation, fmt: str = 'json', pretty: bool = True) -> str:
    return serialize(invocation.to_data(), fmt=fmt, pretty=pretty)


def loads_invocation(data: bytes | bytearray | str,
                     *,
                     fmt: Optional[str] = None,
                     content_type: Optional[str] = None) -> Invocation:
    """Parse an invocation record. Documents that are not mappings give a default Invocation."""
    return Invocation.from_data(deserialize(data, content_type=content_type, fmt=fmt))


__all__ = [
    "deserialize",
    "serialize",
    "detect_format",
    "format_for_filename",
    "dumps_invocation",
    "loads_invocation",
]
