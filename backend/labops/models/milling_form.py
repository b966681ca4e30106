"""
Milling Form model

Snapshot of the milling instructions taken when an item enters milling.
Later edits to the item never alter the historical instruction record.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from labops.db.base import Base

# Namespace for deriving snapshot ids from item ids
MILLING_FORM_NAMESPACE = uuid.UUID("6f1c1d3e-5a0b-4c8e-9d2f-3b7a41e0c915")


def milling_form_id_for(manufacturing_item_id: str) -> str:
    """Deterministic snapshot id, so a retried Start Milling can't create a second form."""
    return str(uuid.uuid5(MILLING_FORM_NAMESPACE, str(manufacturing_item_id)))


class MillingForm(Base):
    """Milling Form - immutable milling instruction for one manufacturing item"""
    __tablename__ = "milling_forms"

    id = Column(String(36), primary_key=True)
    manufacturing_item_id = Column(
        String(36),
        ForeignKey("manufacturing_items.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    patient_name = Column(String(255), nullable=False)

    # Milling instructions
    milling_location = Column(String(100), nullable=False)
    gingiva_color = Column(String(20), nullable=True)
    stained_and_glazed = Column(String(3), nullable=True)
    cementation = Column(String(3), nullable=True)
    additional_notes = Column(Text, nullable=True)

    # Appliance descriptors copied from the item
    upper_appliance_type = Column(String(100), nullable=True)
    lower_appliance_type = Column(String(100), nullable=True)
    upper_appliance_number = Column(String(50), nullable=True)
    lower_appliance_number = Column(String(50), nullable=True)
    shade = Column(String(50), nullable=True)
    screw = Column(String(100), nullable=True)
    material = Column(String(100), nullable=True)
    arch_type = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    manufacturing_item = relationship("ManufacturingItem", backref="milling_forms")

    def __repr__(self):
        return f"<MillingForm {self.id} for item {self.manufacturing_item_id}>"
