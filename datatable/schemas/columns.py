# File: /datatable/schemas/columns.py | Version: 1.0 | Title: Column descriptors (read-only reference data)
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from datatable.schemas._base import FrozenSchema


class DataKind(str, Enum):
    string = "string"
    number = "number"
    date = "date"
    boolean = "boolean"


class RelationConfig(FrozenSchema):
    """Reference-valued column: cells hold one or many ids of records in another table."""

    target_table: str
    display_field: str = "name"
    # Row key holding the related id(s); defaults to the column id
    relation_field: Optional[str] = None
    multiple: bool = False


class ColumnDescriptor(FrozenSchema):
    id: str = Field(min_length=1)
    display_name: Optional[str] = None
    data_kind: DataKind = DataKind.string
    sortable: bool = True
    filterable: bool = True
    visible: Optional[bool] = None
    relation: Optional[RelationConfig] = None

    @property
    def label(self) -> str:
        return self.display_name or self.id

    @property
    def value_key(self) -> str:
        if self.relation is not None and self.relation.relation_field:
            return self.relation.relation_field
        return self.id
