"""Database models"""
from labops.models.manufacturing_item import ManufacturingItem
from labops.models.milling_form import MillingForm
from labops.models.milling_location import MillingLocation

__all__ = ["ManufacturingItem", "MillingForm", "MillingLocation"]
