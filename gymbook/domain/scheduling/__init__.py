"""
Scheduling Domain

Appointment booking against trainer availability.

Structure:
```
domain/scheduling/
├── errors.py      # Rejection reasons, HTTP status mapping, store failure
├── slots.py       # Free-slot resolution and the overlap predicate (pure)
├── validator.py   # Ordered booking rules producing a draft (pure)
├── lifecycle.py   # Status graph and transitions (pure)
├── repository.py  # Availability and booking queries
├── service.py     # Atomic booking creation, authorization, persistence
├── schemas.py     # Request/response models
└── router.py      # HTTP endpoints
```

The pure modules never touch the database or the real clock; the service
feeds them snapshots and an injected "now".
"""

from .errors import Rejection, RejectionReason, StoreUnavailableError
from .lifecycle import apply_transition
from .slots import resolve_free_slots
from .validator import BookingDraft, BookingRequest, validate_booking

__all__ = [
    "BookingDraft",
    "BookingRequest",
    "Rejection",
    "RejectionReason",
    "StoreUnavailableError",
    "apply_transition",
    "resolve_free_slots",
    "validate_booking",
]
