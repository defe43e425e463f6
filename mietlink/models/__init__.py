from .base import Base
from .user import User
from .property import Property
from .document import Document
from .candidate import Candidate
from .task import Task
from .visit_slot import VisitSlot
from .payment import Payment
from .event import Event

__all__ = [
    "Base",
    "User",
    "Property",
    "Document",
    "Candidate",
    "Task",
    "VisitSlot",
    "Payment",
    "Event",
]
