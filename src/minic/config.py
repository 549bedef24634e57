"""Interpreter settings, with overrides from ``MINIC_*`` environment variables.

Values accept booleans, ints, or (optionally quoted) strings::

    MINIC_MAX_CALL_DEPTH=5000 MINIC_PRINT_SEPARATOR='" "' minic run prog.json
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from .heap import DEFAULT_HEAP_LIMIT

ENV_PREFIX = "MINIC_"
DEFAULT_PROMPT = "Please Input an Integer Value : "


@dataclass
class InterpreterConfig:
    max_call_depth: int = 1000
    heap_limit: int = DEFAULT_HEAP_LIMIT
    print_separator: str = "\n"
    input_prompt: str = DEFAULT_PROMPT
    show_prompt: bool = False
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "InterpreterConfig":
        if environ is None:
            environ = os.environ
        values = {}
        for field in fields(cls):
            raw = environ.get(ENV_PREFIX + field.name.upper())
            if raw is None:
                continue
            values[field.name] = _coerce(_parse_value(raw), field.default, field.name)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def _parse_value(raw: str) -> Any:
    if not raw:
        return raw
    lowered = raw.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    try:
        return int(raw)
    except ValueError:
        pass
    # quoted string
    if len(raw) >= 2 and ((raw.startswith("\"") and raw.endswith("\"")) or (raw.startswith("'") and raw.endswith("'"))):
        return raw[1:-1].encode("utf-8").decode("unicode_escape")
    return raw


def _coerce(value: Any, default: Any, name: str) -> Any:
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{ENV_PREFIX}{name.upper()} expects a boolean, got {value!r}")
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{ENV_PREFIX}{name.upper()} expects an integer, got {value!r}")
        return value
    return str(value)
