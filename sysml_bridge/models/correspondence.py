"""Persistence schema for external identifier maps.

An external identifier map is the named, versioned unit of persistence for
correspondences: each correspondence links one engineering-model id (the
internal thing) to one design-model id (the external identifier) for one
mapping direction.
"""

import logging
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .mapping import MappingDirection

logger = logging.getLogger(__name__)


class ExternalIdentifier(BaseModel):
    """Design-side identifier plus the direction it was mapped in."""

    identifier: str = Field(..., description="External (design model) id")
    mapping_direction: MappingDirection = Field(
        ...,
        description="Direction of the pass that established the correspondence"
    )

    @property
    def key(self) -> tuple:
        return (self.identifier, self.mapping_direction)


class Correspondence(BaseModel):
    """One persisted link between an engineering id and a design id."""

    iid: str = Field(default_factory=lambda: str(uuid.uuid4()))
    internal_thing: str = Field(..., description="Engineering model id")
    external_identifier: ExternalIdentifier

    @property
    def external_id(self) -> str:
        return self.external_identifier.identifier

    @property
    def mapping_direction(self) -> MappingDirection:
        return self.external_identifier.mapping_direction


class ExternalIdentifierMap(BaseModel):
    """Named, versioned container of correspondences.

    Attributes:
        iid: Unique id of the map
        name: Human-readable map name (file name when persisted)
        external_model_name: Name of the design model the map belongs to
        external_tool_name: Tool that produced the map
        version: Incremented each time the map is persisted
        correspondences: Ordered correspondence entries
    """

    iid: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    external_model_name: str = ""
    external_tool_name: str = ""
    version: int = 0
    correspondences: List[Correspondence] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_external_identifiers(self) -> "ExternalIdentifierMap":
        seen = set()
        for correspondence in self.correspondences:
            key = correspondence.external_identifier.key
            if key in seen:
                raise ValueError(
                    f"Duplicate correspondence for external id {key[0]} "
                    f"({key[1].value})"
                )
            seen.add(key)
        return self

    def find(self, external_id: str,
             direction: Optional[MappingDirection] = None) -> Optional[Correspondence]:
        """Return the correspondence for an external id (and direction), if any."""
        for correspondence in self.correspondences:
            if correspondence.external_id != external_id:
                continue
            if direction is None or correspondence.mapping_direction == direction:
                return correspondence
        return None
