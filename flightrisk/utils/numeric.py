from __future__ import annotations

import math
import re
from typing import Any, Mapping, Optional, Sequence

_SEGMENT = re.compile(r"^([^\[\]]+)((?:\[\d+\])*)$")
_INDEX = re.compile(r"\[(\d+)\]")


def coerce_finite(value: Any) -> Optional[float]:
    """Numeric value or None. Missing, non-numeric, NaN and +/-inf are all None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def clamp_score(value: Any) -> int:
    num = coerce_finite(value)
    if num is None:
        return 0
    # round half up, so 30.5 -> 31 and not banker's rounding
    return max(0, min(100, int(math.floor(num + 0.5))))


def _step(node: Any, key: str) -> Any:
    if isinstance(node, Mapping):
        return node.get(key)
    return None


def _index(node: Any, idx: int) -> Any:
    if isinstance(node, Sequence) and not isinstance(node, (str, bytes)):
        return node[idx] if 0 <= idx < len(node) else None
    return None


def read_value(observation: Any, path: str) -> Any:
    """
    Walk a dotted field path like "main.pressure" or "weather[0].id".
    Anything that is not the expected container along the way yields None.
    """
    node = observation
    for part in path.split("."):
        m = _SEGMENT.match(part)
        if not m:
            return None
        node = _step(node, m.group(1))
        for idx in _INDEX.findall(m.group(2)):
            node = _index(node, int(idx))
        if node is None:
            return None
    return node


def read_number(observation: Any, path: str) -> Optional[float]:
    return coerce_finite(read_value(observation, path))
