"""
Shipping Workflow

Moves a milled item into transit once the lab reports the carrier
tracking number.
"""
from typing import Optional

from sqlalchemy.orm import Session

from labops.core.status_config import ManufacturingTrigger
from labops.exceptions import ValidationError
from labops.models.manufacturing_item import ManufacturingItem
from labops.schemas.manufacturing import ShippingRequest
from labops.services.store import ManufacturingItemStore
from labops.services.transition_engine import apply_transition


def ship_by_lab(
    db: Session,
    item_id: str,
    request: ShippingRequest,
    actor: Optional[str] = None,
) -> ManufacturingItem:
    """
    milling → in-transit with tracking details.

    The tracking number is checked here, before the engine runs, so the
    caller gets a field error instead of a transition failure.
    """
    tracking_number = (request.tracking_number or "").strip()
    if not tracking_number:
        raise ValidationError("Please enter a tracking number", field="tracking_number")

    payload = {
        "tracking_number": tracking_number,
        "tracking_link": (request.tracking_link or "").strip() or None,
    }
    return apply_transition(
        ManufacturingItemStore(db), item_id, ManufacturingTrigger.SHIP_BY_LAB, payload, actor=actor
    )
