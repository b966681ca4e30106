"""
Milling Location model

Registry of labs / machines that can take a milling job.
"""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String

from labops.db.base import Base


class MillingLocation(Base):
    """Milling Location - selectable destination for Start Milling"""
    __tablename__ = "milling_locations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<MillingLocation {self.name} active={self.is_active}>"
