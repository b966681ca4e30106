"""
Unit Tests for manufacturing report assembly
"""
from datetime import datetime

import pytest

from labops.models.manufacturing_item import ManufacturingItem
from labops.models.milling_form import MillingForm, milling_form_id_for
from labops.schemas.report import NOT_APPLICABLE
from labops.services.report import build_manufacturing_report


def _item(**fields):
    defaults = dict(
        id="item-1",
        patient_name="Dana Park",
        arch_type="dual",
        upper_appliance_type="full-arch-hybrid",
        lower_appliance_type="ti-bar-superstructure",
        shade="A2",
        manufacturing_method="printing",
        status="completed",
    )
    defaults.update(fields)
    return ManufacturingItem(**defaults)


class TestManufacturingReport:

    @pytest.mark.unit
    def test_printing_item_has_no_inspection(self):
        item = _item(
            printing_completed_at=datetime(2026, 3, 14, 15, 30),
            printing_completed_by="tech-001",
            printing_completed_by_name="Dana Lopez",
        )
        report = build_manufacturing_report(item)

        assert report.printing.completed_by_name == "Dana Lopez"
        assert report.inspection is None
        assert report.inspection_applicable is False
        assert report.inspection_label == NOT_APPLICABLE
        assert report.status_label == "Completed"

    @pytest.mark.unit
    def test_inspected_item(self):
        item = _item(
            manufacturing_method="milling",
            print_quality="pass",
            physical_defects="fail",
            screw_access_channel="pass",
            mua_platform="pass",
            inspection_status="rejected",
            inspection_completed_at=datetime(2026, 3, 20, 9, 5),
            inspection_completed_by="qa-002",
        )
        report = build_manufacturing_report(item)

        assert report.printing is None
        assert report.inspection_applicable is True
        assert report.inspection_label == "Rejected"
        assert report.inspection.checklist["physical_defects"] == "fail"
        assert report.inspection.completed_by == "qa-002"

    @pytest.mark.unit
    def test_appliance_labels(self):
        report = build_manufacturing_report(_item(status="pending-printing"))
        assert report.upper_appliance == "Full Arch Hybrid"
        assert report.lower_appliance == "Ti Bar Superstructure"
        assert report.status_label == "New Script"

    @pytest.mark.unit
    def test_includes_milling_form(self):
        form = MillingForm(
            id=milling_form_id_for("item-1"),
            manufacturing_item_id="item-1",
            patient_name="Dana Park",
            milling_location="in-house",
            cementation="yes",
            created_at=datetime(2026, 3, 1, 10, 0),
        )
        report = build_manufacturing_report(_item(manufacturing_method="milling"), form)
        assert report.milling_form.milling_location == "in-house"
        assert report.milling_form.id == milling_form_id_for("item-1")
