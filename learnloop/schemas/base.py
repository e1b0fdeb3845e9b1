"""Wire Model Base — shared pydantic configuration for every persisted payload.

Invariants:
    - Python attributes are snake_case; JSON keys are camelCase (userId, specHash, ...)
    - to_wire() output round-trips through model_validate() unchanged
    - Absent optional fields are omitted from the wire form, never written as null
    - IsoInstant fields hold the caller's original string, but only if it parses
      as ISO-8601; anything else fails validation at the boundary
"""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from learnloop.core.instants import parse_instant


def _check_instant(value: str) -> str:
    parse_instant(value)
    return value


IsoInstant = Annotated[str, AfterValidator(_check_instant)]


class WireModel(BaseModel):
    """Base for event, lesson, run and version payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """JSON-safe dict with camelCase keys, as persisted and hashed."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FrozenWireModel(WireModel):
    """Wire model that cannot be mutated after construction (events)."""

    model_config = ConfigDict(frozen=True)
