"""
Manufacturing list view schemas

The filter and sort state of the manufacturing dashboard, passed
explicitly into the view functions.
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from labops.core.status_config import Bucket


class SortField(str, Enum):
    PATIENT_NAME = "patient_name"
    CREATED_AT = "created_at"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ManufacturingFilters(BaseModel):
    """
    Accepted values per category.

    AND across categories, OR within a category. An empty list places
    no constraint on that category.
    """
    status: List[str] = Field(default_factory=list)
    arch_type: List[str] = Field(default_factory=list)
    appliance_type: List[str] = Field(default_factory=list)
    material: List[str] = Field(default_factory=list)
    shade: List[str] = Field(default_factory=list)
    manufacturing_method: List[str] = Field(default_factory=list)
    milling_location: List[str] = Field(default_factory=list)
    inspection_status: List[str] = Field(default_factory=list)
    search: Optional[str] = Field(None, description="Case-insensitive patient name match")
    bucket: Optional[Bucket] = Field(None, description="Dashboard tab")

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in FILTER_CATEGORIES) and not self.search and (
            self.bucket is None or self.bucket == Bucket.ALL
        )


FILTER_CATEGORIES: List[str] = [
    "status",
    "arch_type",
    "appliance_type",
    "material",
    "shade",
    "manufacturing_method",
    "milling_location",
    "inspection_status",
]


class SortSpec(BaseModel):
    sort_by: SortField = SortField.CREATED_AT
    direction: SortDirection = SortDirection.DESC


class ManufacturingViewConfig(BaseModel):
    """Filter + sort state for one rendering of the list"""
    filters: ManufacturingFilters = Field(default_factory=ManufacturingFilters)
    sort: SortSpec = Field(default_factory=SortSpec)


class BucketCountsResponse(BaseModel):
    counts: Dict[str, int]


class FilterOptionCountsResponse(BaseModel):
    """value -> number of items, per filter category"""
    options: Dict[str, Dict[str, int]]
