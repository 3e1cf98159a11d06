"""Request/response DTOs for HTTP routes."""

import re
from datetime import datetime
from typing import Annotated

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    field_validator,
)

from variant_beacon.domain.variants.query import VariantQuery

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Booleans and floats are rejected rather than coerced.
Int64 = Annotated[StrictInt, Field(ge=INT64_MIN, le=INT64_MAX)]

_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")


# ============================================================================
# Health
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: datetime


# ============================================================================
# Beacon
# ============================================================================


class QueryRequest(BaseModel):
    """Beacon query parameters, from a query string or a JSON body.

    Both the original names (``chromosome``, ``allele``) and the GA4GH names
    (``referenceName``, ``referenceBases``) are accepted.
    """

    model_config = ConfigDict(extra="ignore")

    reference_name: str = Field(
        default="",
        validation_alias=AliasChoices("referenceName", "chromosome"),
    )
    allele: str = Field(
        default="",
        validation_alias=AliasChoices("allele", "referenceBases"),
    )
    coordinate: Int64 | None = None
    start: Int64 | None = None
    end: Int64 | None = None
    start_min: Int64 | None = Field(default=None, validation_alias="startMin")
    start_max: Int64 | None = Field(default=None, validation_alias="startMax")
    end_min: Int64 | None = Field(default=None, validation_alias="endMin")
    end_max: Int64 | None = Field(default=None, validation_alias="endMax")

    @field_validator(
        "coordinate", "start", "end", "start_min", "start_max", "end_min", "end_max",
        mode="before",
    )
    @classmethod
    def _parse_decimal_text(cls, value: object) -> object:
        # Query strings and forms carry text; anything else must already be an int.
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            if _DECIMAL_RE.fullmatch(value):
                return int(value)
        return value

    @field_validator("reference_name", "allele", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    def to_query(self) -> VariantQuery:
        return VariantQuery(
            reference_name=self.reference_name,
            allele=self.allele,
            coordinate=self.coordinate,
            start=self.start,
            end=self.end,
            start_min=self.start_min,
            start_max=self.start_max,
            end_min=self.end_min,
            end_max=self.end_max,
        )


class BeaconResponse(BaseModel):
    """Result of a Beacon query."""

    exists: bool


class BeaconInfo(BaseModel):
    """Beacon information document."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    api_version: str = Field(alias="apiVersion")
    organization: str
    description: str
    project_id: str = Field(alias="projectId")
    table_id: str = Field(alias="tableId")
    coordinate_modes: list[str] = Field(alias="coordinateModes")
