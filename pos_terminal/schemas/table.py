"""Dining table schemas."""

from pydantic import BaseModel, ConfigDict, Field


class TableInfo(BaseModel):
    """Table with its occupancy back-reference."""

    id: int
    number: int
    name: str
    capacity: int
    status: str
    current_order_id: int | None = None

    model_config = ConfigDict(from_attributes=True)


class AssignTableRequest(BaseModel):
    table_id: int
    covers: int = Field(default=1, ge=1)
