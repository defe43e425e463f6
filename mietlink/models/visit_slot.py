import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, Integer, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from .base import Base


class VisitSlot(Base):
    __tablename__ = "visit_slots"
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_visit_slots_capacity"),
        CheckConstraint("seats_left >= 0 AND seats_left <= capacity", name="ck_visit_slots_seats_left"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    starts_at = Column(DateTime(timezone=True), nullable=False)
    duration_min = Column(Integer, default=30, nullable=False)
    capacity = Column(Integer, default=1, nullable=False)
    seats_left = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    # Relationships
    property = relationship("Property", backref="visit_slots")
