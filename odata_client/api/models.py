"""
odata_client.api.models - Pydantic models for API requests/responses
======================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


EXAMPLE_ENTITY_SET = "People"
EXAMPLE_SELECT = ["UserName", "FirstName", "LastName"]


class WhereSpec(BaseModel):
    """
    One $filter condition, or a parenthesized group when ``group`` is set.

    ``value`` may be omitted together with ``operator`` to test for null.
    """

    column: Optional[str] = Field(
        default=None,
        description="Property name; omit for a group",
        json_schema_extra={"example": "FirstName"}
    )
    operator: str = Field(
        default="=",
        description="Comparison operator or function, e.g. =, >, ne, contains",
        json_schema_extra={"example": "="}
    )
    value: Any = Field(
        default=None,
        description="Literal value; null produces a null test",
        json_schema_extra={"example": "Russell"}
    )
    boolean: str = Field(
        default="and",
        pattern="^(and|or)$",
        description="How this condition joins the previous one",
    )
    group: Optional[List["WhereSpec"]] = Field(
        default=None,
        description="Nested conditions rendered inside parentheses",
    )


class OrderSpec(BaseModel):
    column: str = Field(json_schema_extra={"example": "LastName"})
    direction: str = Field(default="asc", pattern="^(asc|desc)$")


class ExpandSpec(BaseModel):
    property: str = Field(json_schema_extra={"example": "Trips"})
    select: Optional[List[str]] = None
    where: Optional[List[WhereSpec]] = None
    top: Optional[int] = Field(default=None, ge=0)


class QuerySpec(BaseModel):
    """A complete entity-set query."""

    entity_set: str = Field(
        default=EXAMPLE_ENTITY_SET,
        description="Entity set name",
        json_schema_extra={"example": EXAMPLE_ENTITY_SET}
    )
    key: Optional[Union[int, str]] = Field(
        default=None,
        description="Entity key for single-entity requests",
    )
    select: Optional[List[str]] = Field(
        default=None,
        description="Fields for $select",
        json_schema_extra={"example": EXAMPLE_SELECT}
    )
    where: Optional[List[WhereSpec]] = Field(
        default=None,
        description="$filter conditions, joined left to right",
    )
    order: Optional[List[OrderSpec]] = Field(default=None, description="$orderby")
    expand: Optional[List[Union[str, ExpandSpec]]] = Field(default=None, description="$expand")
    top: Optional[int] = Field(default=None, ge=0, description="$top")
    skip: Optional[int] = Field(default=None, ge=0, description="$skip")
    count: bool = Field(default=False, description="Request /$count instead of entities")
    total_count: bool = Field(default=False, description="Include $count=true")


class CompileResponse(BaseModel):
    request: str
    bindings: List[Any]


class QueryResponse(BaseModel):
    """Response model for executed queries."""

    entity_set: str
    request: str
    count: int
    total_count: Optional[int] = None
    items: List[Dict[str, Any]]


class CountResponse(BaseModel):
    entity_set: str
    request: str
    count: int


WhereSpec.model_rebuild()
