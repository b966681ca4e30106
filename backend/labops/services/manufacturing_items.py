"""
Manufacturing item intake

Creates items from converted lab scripts; the fabrication path and
therefore the initial status come from the manufacturing method.
"""
from sqlalchemy.orm import Session

from labops.core.status_config import initial_status_for
from labops.models.manufacturing_item import ManufacturingItem
from labops.schemas.manufacturing import ManufacturingItemCreate
from labops.services.store import ManufacturingItemStore
from labops.services.transition_engine import normalize_payload


def create_manufacturing_item(db: Session, data: ManufacturingItemCreate) -> ManufacturingItem:
    record = normalize_payload(data)
    record["status"] = initial_status_for(record["manufacturing_method"])
    return ManufacturingItemStore(db).create(record)


def delete_manufacturing_item(db: Session, item_id: str) -> None:
    """Remove an item created in error; items with a milling form are kept."""
    ManufacturingItemStore(db).delete(item_id)
