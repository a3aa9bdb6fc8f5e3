from __future__ import annotations
from typing import Any, Mapping, Optional


def get_param(obj: Optional[Mapping[str, Any]], key: str, default: Any = None) -> Any:
    """Value of `key` in `obj`; `default` when obj is None or the value is missing/None."""
    if obj is None:
        return default
    value = obj.get(key)
    return default if value is None else value
