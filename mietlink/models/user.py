from datetime import datetime
from sqlalchemy import Column, String, DateTime
from .base import Base
from mietlink.domain.enums import UserRole, Language


class User(Base):
    __tablename__ = "users"

    # Identity as issued by the user-management service
    id = Column(String(64), primary_key=True)
    email = Column(String, unique=True)
    first_name = Column(String)
    last_name = Column(String)
    role = Column(String(16), default=UserRole.tenant.value, nullable=False)
    language = Column(String(4), default=Language.de.value, nullable=False)
    badge_paid_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def has_badge(self) -> bool:
        return self.badge_paid_at is not None
