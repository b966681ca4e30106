"""
Manufacturing report schemas

Display/export record combining printing completion and inspection data
for a single item.
"""
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel

from labops.schemas.manufacturing import MillingFormResponse

NOT_APPLICABLE = "Not applicable"


class PrintingSummary(BaseModel):
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    completed_by_name: Optional[str] = None


class InspectionSummary(BaseModel):
    checklist: Dict[str, Optional[str]]
    status: Optional[str] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    completed_by_name: Optional[str] = None


class ManufacturingReport(BaseModel):
    item_id: str
    patient_name: str
    manufacturing_method: str
    status: str
    status_label: str
    upper_appliance: str
    lower_appliance: str
    printing: Optional[PrintingSummary] = None
    inspection: Optional[InspectionSummary] = None
    inspection_applicable: bool
    inspection_label: str
    milling_form: Optional[MillingFormResponse] = None
