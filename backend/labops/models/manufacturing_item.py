"""
Manufacturing Item model

A single dental appliance fabrication job. Created from a completed lab
script, it follows exactly one fabrication path:

    printing: pending-printing → printing → completed
    milling:  pending-milling → milling → in-transit → inspection → completed

Column names and enumerated values are shared with the existing store
and must not be renamed.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text

from labops.db.base import Base


def generate_item_id() -> str:
    return str(uuid.uuid4())


class ManufacturingItem(Base):
    """
    Manufacturing Item - the order tracked through fabrication.

    Status is only ever changed by the transition engine.
    """
    __tablename__ = "manufacturing_items"

    id = Column(String(36), primary_key=True, default=generate_item_id)

    # Upstream references (lab script conversion)
    lab_script_id = Column(String(36), nullable=True, index=True)
    lab_report_card_id = Column(String(36), nullable=True, index=True)
    patient_id = Column(String(36), nullable=True, index=True)

    # Case descriptors - immutable after creation
    patient_name = Column(String(255), nullable=False, index=True)
    arch_type = Column(String(20), nullable=False)  # upper, lower, dual
    upper_appliance_type = Column(String(100), nullable=True)
    lower_appliance_type = Column(String(100), nullable=True)
    upper_appliance_number = Column(String(50), nullable=True)
    lower_appliance_number = Column(String(50), nullable=True)
    is_nightguard_needed = Column(String(3), nullable=False, default="no")
    upper_nightguard_number = Column(String(50), nullable=True)
    lower_nightguard_number = Column(String(50), nullable=True)
    shade = Column(String(50), nullable=False)
    material = Column(String(100), nullable=True)
    screw = Column(String(100), nullable=True)
    manufacturing_method = Column(String(20), nullable=False, index=True)  # printing, milling

    # Lifecycle
    # pending-printing | pending-milling | printing | milling | in-transit | inspection | completed
    status = Column(String(30), nullable=False, index=True)

    # Milling path (set by Start Milling)
    milling_location = Column(String(100), nullable=True, index=True)
    gingiva_color = Column(String(20), nullable=True)
    stained_and_glazed = Column(String(3), nullable=True)
    cementation = Column(String(3), nullable=True)  # only asked for tie-bar superstructures
    additional_notes = Column(Text, nullable=True)

    # Shipping (set by Shipped by Lab)
    tracking_number = Column(String(100), nullable=True)
    tracking_link = Column(String(500), nullable=True)

    # Printing completion
    printing_completed_at = Column(DateTime, nullable=True)
    printing_completed_by = Column(String(36), nullable=True)
    printing_completed_by_name = Column(String(255), nullable=True)

    # Inspection checklist (pass/fail) and outcome
    print_quality = Column(String(4), nullable=True)
    physical_defects = Column(String(4), nullable=True)
    screw_access_channel = Column(String(4), nullable=True)
    mua_platform = Column(String(4), nullable=True)
    inspection_status = Column(String(10), nullable=True, index=True)  # approved, rejected
    inspection_completed_at = Column(DateTime, nullable=True)
    inspection_completed_by = Column(String(36), nullable=True)
    inspection_completed_by_name = Column(String(255), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ManufacturingItem {self.id} {self.patient_name!r} status={self.status}>"
