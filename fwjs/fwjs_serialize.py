from __future__ import annotations

import json
import re
from typing import Any, Optional
import collections.abc

import yaml


# --------------------------
# Helpers
# --------------------------

def _norm_text(data: bytes | bytearray | str, *, encoding: Optional[str] = None) -> str:
    if isinstance(data, (bytes, bytearray)):
        return data.decode(encoding or 'utf-8', errors='replace')
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
    if isinstance(obj, (list, tuple)):
        return [_to_builtin(x) for x in obj]
    if isinstance(obj, collections.abc.Mapping):
        return {k: _to_builtin(v) for k, v in obj.items()}
    return obj


def detect_format(content_type: Optional[str] = None,
                  data_hint: Optional[str] = None,
                  filename: Optional[str] = None) -> Optional[str]:
    """
    Returns 'json' or 'yaml'.
    Uses Content-Type first, then the file suffix, then simple data sniffing.
    """
    ct = (content_type or "").lower()
    if 'json' in ct:
        return 'json'
    if 'yaml' in ct or 'x-yaml' in ct:
        return 'yaml'

    if filename:
        name = filename.lower()
        if name.endswith('.json'):
            return 'json'
        if name.endswith(('.yaml', '.yml')):
            return 'yaml'

    if data_hint is not None:
        s = data_hint.lstrip()
        if s.startswith('{') or s.startswith('['):
            # Try JSON first; YAML is a superset
            return 'json'
        if s:
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
    Convert tree-document text into plain Python structures.
    Supported fmt: 'json', 'yaml'. If fmt is None, uses content_type, then sniffing.
    Raises ValueError when the text cannot be decoded in the chosen format.
    """
    enc = _encoding_from_content_type(content_type)
    text = _norm_text(data, encoding=enc)
    f = (fmt or detect_format(content_type, text) or 'yaml').lower()
    if f == 'json':
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Flow-style YAML is often labelled JSON (unquoted keys, etc.)
            try:
                return yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid JSON document: {e}") from e
    if f in ('yaml', 'yml'):
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML document: {e}") from e
    raise ValueError(f"Unsupported tree format: {fmt!r}")


def serialize(value: Any,
              *,
              fmt: str,
              pretty: bool = True) -> str:
    """
    Convert plain Python structures into document text.
    - fmt: 'json' | 'yaml'
    """
    f = (fmt or '').lower()
    built = _to_builtin(value)
    if f == 'json':
        return json.dumps(built, ensure_ascii=False, indent=2 if pretty else None)
    if f in ('yaml', 'yml'):
        return yaml.safe_dump(built, sort_keys=False, default_flow_style=None if pretty else True)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


__all__ = [
    "deserialize",
    "serialize",
    "detect_format",
]
