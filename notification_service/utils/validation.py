"""Input checks shared by entities, commands and queries."""

from typing import Any
from uuid import UUID

NIL_UUID = UUID(int=0)


def is_missing_id(value: Any) -> bool:
    """True for None, an empty string and the all-zero UUID."""
    if value is None or value == "":
        return True
    return value == NIL_UUID
