"""
Milling location registry

Active locations populate the Start Milling location picker.
"""
from datetime import datetime
from typing import Iterable, List

from sqlalchemy.orm import Session

from labops.db.session import unit_of_work
from labops.exceptions import DuplicateError, NotFoundError, ValidationError
from labops.logging_config import get_logger
from labops.models.milling_location import MillingLocation
from labops.schemas.milling_location import MillingLocationUpdate

logger = get_logger(__name__)


def list_milling_locations(db: Session, active_only: bool = True) -> List[MillingLocation]:
    q = db.query(MillingLocation)
    if active_only:
        q = q.filter(MillingLocation.is_active.is_(True))
    return q.order_by(MillingLocation.name.asc()).all()


def is_active_location(db: Session, name: str) -> bool:
    return (
        db.query(MillingLocation)
        .filter(MillingLocation.name == name, MillingLocation.is_active.is_(True))
        .first()
        is not None
    )


def get_milling_location(db: Session, location_id: str) -> MillingLocation:
    location = db.get(MillingLocation, location_id)
    if location is None:
        raise NotFoundError("Milling location", location_id)
    return location


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Milling location name cannot be blank", field="name")
    return name


def _ensure_unique_name(db: Session, name: str, exclude_id: str = None) -> None:
    q = db.query(MillingLocation).filter(MillingLocation.name == name)
    if exclude_id:
        q = q.filter(MillingLocation.id != exclude_id)
    if q.first() is not None:
        raise DuplicateError("Milling location", field="name", value=name)


def create_milling_location(db: Session, name: str) -> MillingLocation:
    name = _clean_name(name)
    _ensure_unique_name(db, name)
    location = MillingLocation(name=name, is_active=True)
    with unit_of_work(db, "create milling location"):
        db.add(location)
        db.flush()
    logger.info(f"Created milling location {name}")
    return location


def update_milling_location(
    db: Session, location_id: str, data: MillingLocationUpdate
) -> MillingLocation:
    location = get_milling_location(db, location_id)
    with unit_of_work(db, "update milling location"):
        if data.name is not None:
            name = _clean_name(data.name)
            _ensure_unique_name(db, name, exclude_id=location_id)
            location.name = name
        if data.is_active is not None:
            location.is_active = data.is_active
        location.updated_at = datetime.utcnow()
        db.flush()
    return location


def delete_milling_location(db: Session, location_id: str) -> None:
    location = get_milling_location(db, location_id)
    name = location.name
    with unit_of_work(db, "delete milling location"):
        db.delete(location)
    logger.info(f"Deleted milling location {name}")


def seed_milling_locations(db: Session, names: Iterable[str]) -> int:
    """Insert the given locations into an empty registry. Returns how many were added."""
    if db.query(MillingLocation).count() > 0:
        return 0
    added = 0
    with unit_of_work(db, "seed milling locations"):
        for name in names:
            db.add(MillingLocation(name=name, is_active=True))
            added += 1
    logger.info(f"Seeded {added} milling locations")
    return added
