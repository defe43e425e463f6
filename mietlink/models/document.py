import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Boolean, Float, Index, Uuid
from sqlalchemy.orm import relationship
from .base import Base


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (Index("ix_documents_user_property", "user_id", "property_id"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False)
    # Null means the document can be reused for any application of the user
    property_id = Column(Uuid, ForeignKey("properties.id"))
    type = Column(String(32), nullable=False)  # see DocumentType
    url = Column(String, nullable=False)
    filename = Column(String)
    mime_type = Column(String(128))
    is_valid = Column(Boolean, default=False, nullable=False)
    confidence = Column(Float, default=0.0, nullable=False)
    validation_reason = Column(Text)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", backref="documents")
    property = relationship("Property", backref="documents")
