import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, Date, ForeignKey, Text, Boolean, String, Uuid
from sqlalchemy.orm import relationship
from .base import Base
from mietlink.domain.enums import TaskStatus


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    due_date = Column(Date)
    mandatory = Column(Boolean, default=True, nullable=False)
    status = Column(String(16), default=TaskStatus.pending.value, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    # Relationships
    property = relationship("Property", backref="tasks")
