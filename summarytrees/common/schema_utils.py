"""
Content ids and JSON views for parameter dataclasses.

A run is identified by the hash of its parameters, so floats are rounded
before hashing: epsilon=0.1 and epsilon=0.30000000000000004 - 0.2 name the
same run.
"""

import hashlib
import json
import math
import numbers
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any


def canonical(obj: Any, places: int = 10) -> Any:
    """JSON-ready copy of obj with plain ints and rounded floats."""
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, numbers.Integral):
        return int(obj)
    if isinstance(obj, numbers.Real):
        x = float(obj)
        if not math.isfinite(x):
            return repr(x)
        x = round(x, places)
        return 0.0 if x == 0 else x
    if is_dataclass(obj):
        return canonical(asdict(obj), places)
    if isinstance(obj, dict):
        return {str(k): canonical(v, places) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [canonical(v, places) for v in obj]
    return obj


def content_id(obj: Any, places: int = 10, digest_bytes: int = 12) -> str:
    payload = json.dumps(canonical(obj, places), sort_keys=True, separators=(",", ":"))
    return hashlib.blake2b(payload.encode("utf-8"), digest_size=digest_bytes).hexdigest()


@dataclass
class SchemaClass:
    def get_id(self) -> str:
        return content_id(self)

    def to_dict(self) -> dict:
        return canonical(self)

    # For logging ease
    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent=4)
