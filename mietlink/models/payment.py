import uuid
from datetime import datetime
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base
from mietlink.domain.enums import PaymentStatus


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False)
    amount_chf = Column(Numeric(10, 2), nullable=False)
    stripe_session_id = Column(String)
    status = Column(String(16), default=PaymentStatus.pending.value, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    # Relationships
    user = relationship("User", backref="payments")
