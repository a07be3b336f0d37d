"""
Domain errors

Every error subclasses ValueError so callers that only distinguish
"bad request" from success keep working.
"""
from typing import Optional


class HMSError(ValueError):
    """Base class of all booking / folio errors"""


class NotFoundError(HMSError):
    """Referenced entity id is absent from the store"""

    def __init__(self, entity_type: str, entity_id: Optional[str] = None, message: Optional[str] = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message or f"{entity_type.capitalize()} not found")


class ValidationError(HMSError):
    """Malformed input to a creation or update call"""


class InvalidStateError(HMSError):
    """Operation attempted from a lifecycle state that does not allow it"""
