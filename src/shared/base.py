from __future__ import annotations

from pydantic import BaseModel
from pydantic.config import ConfigDict


def to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class BaseSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenSchema(BaseSchema):
    # Derived values are snapshots; nothing downstream may edit them in place.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)
