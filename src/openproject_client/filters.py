"""
List filters, serialized into OpenProject's ``filters`` query parameter:

    [{"status": {"operator": "=", "values": ["open"]}}]

OpenProject only combines filters with AND.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

FILTERS_PARAM = "filters"
PAGE_SIZE_PARAM = "pageSize"
OFFSET_PARAM = "offset"


class FilterOperator(str, Enum):
    EQUAL = "="
    NOT_EQUAL = "<>"
    GREATER_THAN = ">"
    LESS_THAN = "<"
    CONTAINS = "**"
    LIKE = "~"
    GREATER_OR_EQUAL = ">="
    LESS_OR_EQUAL = "<="


@dataclass(frozen=True)
class Filter:
    field: str
    operator: FilterOperator
    value: str

    def __post_init__(self) -> None:
        # Accept the raw operator symbol ("=", "<>", ...) as well as the enum
        object.__setattr__(self, "operator", FilterOperator(self.operator))

    def to_dict(self) -> Dict[str, Dict[str, object]]:
        return {
            self.field: {"operator": self.operator.value, "values": [self.value]}
        }


@dataclass
class FilterSpec:
    fields: List[Filter] = field(default_factory=list)
    page_size: Optional[int] = None
    offset: Optional[int] = None

    def add(
        self, field_name: str, operator: Union[FilterOperator, str], value: str
    ) -> "FilterSpec":
        self.fields.append(Filter(field_name, FilterOperator(operator), value))
        return self

    def to_query_value(self) -> str:
        return json.dumps([f.to_dict() for f in self.fields], separators=(",", ":"))

    def to_params(self) -> Dict[str, str]:
        params = {FILTERS_PARAM: self.to_query_value()}
        if self.page_size is not None:
            params[PAGE_SIZE_PARAM] = str(self.page_size)
        if self.offset is not None:
            params[OFFSET_PARAM] = str(self.offset)
        return params


__all__ = [
    "FilterOperator",
    "Filter",
    "FilterSpec",
    "FILTERS_PARAM",
    "PAGE_SIZE_PARAM",
    "OFFSET_PARAM",
]
