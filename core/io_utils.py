from __future__ import annotations
import dataclasses
import json
import os
from datetime import datetime, timezone
from typing import Any


def utc_now_iso() -> str:
    # same shape as JavaScript's Date.toISOString(): 2024-01-01T12:00:00.000Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def _json_default(obj: Any) -> Any:
    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump):
        return model_dump()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    return str(obj)


def dump_json(obj: Any, *, indent: int | None = 2) -> str:
    """Serialize a tool payload for the wire.

    Pydantic models and dataclasses are expanded, anything else unknown is
    rendered with ``str()``. Circular structures still raise ``ValueError``.
    """
    return json.dumps(obj, indent=indent, ensure_ascii=False, default=_json_default)
