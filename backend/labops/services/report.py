"""
Manufacturing report assembly

Read-only join of an item's printing completion and inspection results
into one display/export record.
"""
from typing import Optional

from labops.core.appliance_rules import format_appliance_type
from labops.core.status_config import INSPECTION_CHECKLIST_FIELDS, STATUS_LABELS
from labops.models.manufacturing_item import ManufacturingItem
from labops.models.milling_form import MillingForm
from labops.schemas.manufacturing import MillingFormResponse
from labops.schemas.report import (
    NOT_APPLICABLE,
    InspectionSummary,
    ManufacturingReport,
    PrintingSummary,
)


def _printing_summary(item: ManufacturingItem) -> Optional[PrintingSummary]:
    if item.printing_completed_at is None and not item.printing_completed_by:
        return None
    return PrintingSummary(
        completed_at=item.printing_completed_at,
        completed_by=item.printing_completed_by,
        completed_by_name=item.printing_completed_by_name,
    )


def _inspection_summary(item: ManufacturingItem) -> Optional[InspectionSummary]:
    if item.inspection_status is None and item.inspection_completed_at is None:
        return None
    return InspectionSummary(
        checklist={field: getattr(item, field) for field in INSPECTION_CHECKLIST_FIELDS},
        status=item.inspection_status,
        completed_at=item.inspection_completed_at,
        completed_by=item.inspection_completed_by,
        completed_by_name=item.inspection_completed_by_name,
    )


def build_manufacturing_report(
    item: ManufacturingItem,
    milling_form: Optional[MillingForm] = None,
) -> ManufacturingReport:
    """
    Assemble the report for one item.

    Items completed on the printing path never went through inspection;
    their inspection section is reported as not applicable.
    """
    inspection = _inspection_summary(item)
    if inspection is not None:
        inspection_label = (inspection.status or "").capitalize()
    else:
        inspection_label = NOT_APPLICABLE

    return ManufacturingReport(
        item_id=item.id,
        patient_name=item.patient_name,
        manufacturing_method=item.manufacturing_method,
        status=item.status,
        status_label=STATUS_LABELS.get(item.status, item.status),
        upper_appliance=format_appliance_type(item.upper_appliance_type),
        lower_appliance=format_appliance_type(item.lower_appliance_type),
        printing=_printing_summary(item),
        inspection=inspection,
        inspection_applicable=inspection is not None,
        inspection_label=inspection_label,
        milling_form=MillingFormResponse.model_validate(milling_form) if milling_form else None,
    )
