"""Scope model for retrieval queries."""

from enum import Enum

from pydantic import BaseModel


class RagScope(str, Enum):
    GLOBAL = "global"
    PERSON = "person"
    DEPARTMENT = "department"
    WORK = "work"
    PROJECT = "project"


class ScopeFilter(BaseModel):
    """A predicate over vector metadata.

    An empty filter (key is None) matches every record. With operator
    "contains" the metadata field is a list and must include value; with
    "equals" the field must equal value.
    """

    key: str | None = None
    value: str | None = None
    operator: str = "equals"

    def is_global(self) -> bool:
        return self.key is None
