from __future__ import annotations

from uuid import uuid4


def new_id() -> str:
    """
    Fresh random entity id (UUID4, canonical hyphenated form).
    """
    return str(uuid4())
