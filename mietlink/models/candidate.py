import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Boolean, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship, validates
from .base import Base
from mietlink.domain.enums import CandidateStatus, StatusTier


class Candidate(Base):
    __tablename__ = "candidates"
    __table_args__ = (UniqueConstraint("user_id", "property_id", name="uq_candidates_user_property"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    tenant_score = Column(Integer, default=0, nullable=False)
    score_tier = Column(String(16), default=StatusTier.incomplete.value, nullable=False)
    score_reason = Column(Text)
    status = Column(String(32), default=CandidateStatus.dossier_submitted.value, nullable=False)
    landlord_decision = Column(String(16))  # accepted, rejected
    badge_flag = Column(Boolean, default=False, nullable=False)
    cover_letter = Column(Text)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", backref="candidates")
    property = relationship("Property", backref="candidates")

    @validates("user_id", "property_id")
    def _owner_is_immutable(self, key, value):
        current = getattr(self, key)
        if current is not None and current != value:
            raise ValueError(f"{key} cannot change once the application exists")
        return value
