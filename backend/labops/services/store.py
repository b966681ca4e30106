"""
Manufacturing stores

SQLAlchemy-backed implementations of the two collections the lifecycle
works against:

- ManufacturingItemStore: get / list / create / update / delete of items
- MillingFormStore: get / create of milling instruction snapshots

Every write runs inside unit_of_work(), so a store call made on its own
commits immediately, while calls grouped by a workflow commit together.
"""
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from labops.db.session import unit_of_work
from labops.exceptions import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from labops.logging_config import get_logger
from labops.models.manufacturing_item import ManufacturingItem
from labops.models.milling_form import MillingForm, milling_form_id_for

logger = get_logger(__name__)

_ITEM_COLUMNS = frozenset(c.name for c in ManufacturingItem.__table__.columns)
_FORM_COLUMNS = frozenset(c.name for c in MillingForm.__table__.columns)


class ManufacturingItemStore:
    """Persistent collection of manufacturing items."""

    # Case descriptors set by lab script conversion; fixed at creation
    CASE_DESCRIPTOR_FIELDS = frozenset({
        "patient_name",
        "arch_type",
        "upper_appliance_type",
        "lower_appliance_type",
        "upper_appliance_number",
        "lower_appliance_number",
        "is_nightguard_needed",
        "upper_nightguard_number",
        "lower_nightguard_number",
        "shade",
        "material",
        "screw",
        "manufacturing_method",
    })
    IMMUTABLE_FIELDS = CASE_DESCRIPTOR_FIELDS | {"id", "created_at"}

    def __init__(self, db: Session):
        self.db = db

    def get(self, item_id: str) -> ManufacturingItem:
        """
        Fetch one item.

        Raises:
            NotFoundError: If no item has this id
        """
        item = self.db.get(ManufacturingItem, item_id)
        if item is None:
            raise NotFoundError("Manufacturing item", item_id)
        return item

    def list(self, query: Optional[Mapping[str, Any]] = None) -> List[ManufacturingItem]:
        """
        List items, newest first.

        Args:
            query: Optional column -> value equality constraints
        """
        q = self.db.query(ManufacturingItem)
        for column, value in (query or {}).items():
            if column not in _ITEM_COLUMNS:
                raise ValidationError(f"Unknown field '{column}'", field=column)
            q = q.filter(getattr(ManufacturingItem, column) == value)
        return q.order_by(ManufacturingItem.created_at.desc()).all()

    def create(self, record: Mapping[str, Any]) -> ManufacturingItem:
        """Insert a new item from a column -> value mapping."""
        self._check_columns(record)
        item = ManufacturingItem(**dict(record))
        with unit_of_work(self.db, "create manufacturing item"):
            self.db.add(item)
            self.db.flush()
        logger.info(
            f"Created manufacturing item {item.id} ({item.manufacturing_method})",
            extra={"item_id": item.id, "status": item.status},
        )
        return item

    def update(
        self,
        item_id: str,
        patch: Mapping[str, Any],
        expected_status: Optional[str] = None,
    ) -> ManufacturingItem:
        """
        Apply a patch to one item.

        Args:
            item_id: Item to change
            patch: Column -> new value
            expected_status: When given, the write only applies if the stored
                status still equals it

        Raises:
            NotFoundError: If the item does not exist
            ConflictError: If the stored status no longer matches expected_status
            BusinessRuleError: If the patch touches an immutable field
        """
        touched = self.IMMUTABLE_FIELDS.intersection(patch)
        if touched:
            raise BusinessRuleError(
                f"Cannot change {', '.join(sorted(touched))} after creation",
                rule="immutable_case_fields",
                details={"fields": sorted(touched)},
            )
        self._check_columns(patch)

        values: Dict[str, Any] = dict(patch)
        values.setdefault("updated_at", datetime.utcnow())

        with unit_of_work(self.db, "update manufacturing item"):
            stmt = update(ManufacturingItem).where(ManufacturingItem.id == item_id)
            if expected_status is not None:
                stmt = stmt.where(ManufacturingItem.status == expected_status)
            result = self.db.execute(
                stmt.values(**values).execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                # Tell "gone" apart from "changed underneath us"
                current = self.db.get(ManufacturingItem, item_id, populate_existing=True)
                if current is None:
                    raise NotFoundError("Manufacturing item", item_id)
                raise ConflictError(
                    "Manufacturing item was modified by another user",
                    details={
                        "item_id": item_id,
                        "expected_status": expected_status,
                        "current_status": current.status,
                    },
                )
            self.db.flush()

        # The identity map still holds the pre-update row
        return self.db.get(ManufacturingItem, item_id, populate_existing=True)

    def delete(self, item_id: str) -> None:
        """
        Remove an item that never produced a milling form.

        Milling forms are permanent instruction records, so an item that
        has one cannot be deleted.

        Raises:
            NotFoundError: If the item does not exist
            BusinessRuleError: If the item has a milling form
        """
        item = self.get(item_id)
        has_form = (
            self.db.query(MillingForm.id)
            .filter(MillingForm.manufacturing_item_id == item_id)
            .first()
            is not None
        )
        if has_form:
            raise BusinessRuleError(
                "Cannot delete an item that has a milling form",
                rule="milling_form_retained",
                details={"item_id": item_id, "status": item.status},
            )
        with unit_of_work(self.db, "delete manufacturing item"):
            self.db.execute(delete(ManufacturingItem).where(ManufacturingItem.id == item_id))
        logger.info(f"Deleted manufacturing item {item_id}", extra={"item_id": item_id})

    @staticmethod
    def _check_columns(record: Mapping[str, Any]) -> None:
        unknown = set(record) - _ITEM_COLUMNS
        if unknown:
            raise ValidationError(
                f"Unknown manufacturing item fields: {', '.join(sorted(unknown))}",
                details={"fields": sorted(unknown)},
            )


class MillingFormStore:
    """Milling instruction snapshots, one per item that entered milling."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_item(self, manufacturing_item_id: str) -> Optional[MillingForm]:
        return (
            self.db.query(MillingForm)
            .filter(MillingForm.manufacturing_item_id == manufacturing_item_id)
            .first()
        )

    def create(self, record: Mapping[str, Any]) -> MillingForm:
        """
        Create the snapshot for an item, or return the one that already exists.

        The id is derived from the item id, so re-running a partially failed
        Start Milling never produces a second form.
        """
        unknown = set(record) - _FORM_COLUMNS
        if unknown:
            raise ValidationError(
                f"Unknown milling form fields: {', '.join(sorted(unknown))}",
                details={"fields": sorted(unknown)},
            )
        item_id = record.get("manufacturing_item_id")
        if not item_id:
            raise ValidationError("manufacturing_item_id is required", field="manufacturing_item_id")

        existing = self.get_by_item(item_id)
        if existing is not None:
            logger.info(f"Milling form already exists for item {item_id}, reusing {existing.id}")
            return existing

        form = MillingForm(**dict(record))
        form.id = milling_form_id_for(item_id)
        with unit_of_work(self.db, "create milling form"):
            self.db.add(form)
            self.db.flush()
        logger.info(f"Created milling form {form.id} for item {item_id}")
        return form
