# File: /datatable/schemas/filters.py | Version: 1.0 | Title: Filter Schemas (flat groups + advanced rule tree)
from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, Field, model_validator

from datatable.schemas._base import BaseSchema
from datatable.schemas.columns import DataKind


class FilterOperator(str, Enum):
    equals = "equals"
    not_equals = "notEquals"
    contains = "contains"
    not_contains = "notContains"
    starts_with = "startsWith"
    ends_with = "endsWith"
    greater_than = "greaterThan"
    less_than = "lessThan"
    greater_than_or_equal = "greaterThanOrEqual"
    less_than_or_equal = "lessThanOrEqual"
    is_empty = "isEmpty"
    is_not_empty = "isNotEmpty"
    is_any_of = "isAnyOf"
    is_none_of = "isNoneOf"
    # Relation operators (reference-valued columns)
    related_to = "relatedTo"
    not_related_to = "notRelatedTo"
    has_any_relation = "hasAnyRelation"
    has_no_relation = "hasNoRelation"
    related_to_any = "relatedToAny"
    related_to_all = "relatedToAll"


class InputKind(str, Enum):
    """Shape of the value an operator expects."""

    none = "none"
    text = "text"
    number = "number"
    date = "date"
    select = "select"
    multiselect = "multiselect"


class FilterLogic(str, Enum):
    and_ = "AND"
    or_ = "OR"


class FilterOperatorConfig(BaseModel):
    value: FilterOperator
    label: str
    description: str
    input_kind: InputKind
    available_for: List[DataKind]


def new_filter_id() -> str:
    return str(uuid.uuid4())


def normalize_filter_value(operator: FilterOperator, value: Any) -> Any:
    """
    Coerce `value` into the shape declared by the operator's input kind.

    none        -> None (value dropped)
    multiselect -> list (scalar wrapped, None -> [])
    otherwise   -> a single scalar; lists are rejected
    Raw text is kept as typed: number/date parsing happens lazily at
    evaluation time so half-typed input never fails validation.
    """
    from datatable.constants import input_kind_for  # late import to avoid circulars

    kind = input_kind_for(operator)
    if kind == InputKind.none:
        return None
    if kind == InputKind.multiselect:
        if value is None:
            return []
        if isinstance(value, (list, tuple, set, frozenset)):
            return list(value)
        return [value]
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        raise ValueError(
            f"Operator '{operator.value}' expects a single value, got {type(value).__name__}"
        )
    return value


class Filter(BaseSchema):
    id: str = Field(default_factory=new_filter_id)
    column_id: str
    operator: FilterOperator
    value: Any = None

    @model_validator(mode="after")
    def _shape_value(self) -> "Filter":
        self.value = normalize_filter_value(self.operator, self.value)
        return self


class FilterGroup(BaseSchema):
    logic: FilterLogic = FilterLogic.and_
    filters: List[Filter] = Field(default_factory=list)


# ----------------------------
# Advanced filter tree
# ----------------------------
class RuleNode(BaseSchema):
    type: Literal["rule"] = "rule"
    id: str = Field(default_factory=new_filter_id)
    field: str
    operator: FilterOperator
    value: Any = None

    @model_validator(mode="after")
    def _shape_value(self) -> "RuleNode":
        self.value = normalize_filter_value(self.operator, self.value)
        return self


class GroupNode(BaseSchema):
    type: Literal["group"] = "group"
    id: str = Field(default_factory=new_filter_id)
    logic: FilterLogic = FilterLogic.and_
    children: List[FilterNode] = Field(default_factory=list)


FilterNode = Annotated[Union[RuleNode, GroupNode], Field(discriminator="type")]

GroupNode.model_rebuild()
