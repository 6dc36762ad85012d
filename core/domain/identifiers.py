from __future__ import annotations

from uuid import uuid4


def generate_id(prefix: str | None = None) -> str:
    value = str(uuid4())
    if prefix:
        return f"{prefix}-{value}"
    return value


__all__ = ["generate_id"]
