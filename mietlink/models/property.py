import uuid
from datetime import datetime
from sqlalchemy import Column, String, Numeric, DateTime, Date, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import relationship
from .base import Base


class Property(Base):
    __tablename__ = "properties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    slug = Column(String(16), unique=True, nullable=False)
    address = Column(Text, nullable=False)
    rent_chf = Column(Numeric(10, 2), nullable=False)
    notice_months = Column(Integer, default=3)
    earliest_exit = Column(Date)
    key_count = Column(Integer, default=1)
    main_photo_url = Column(String)
    closed_at = Column(DateTime(timezone=True))  # null while the listing accepts applications
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    # Relationships
    owner = relationship("User", backref="properties")

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None
