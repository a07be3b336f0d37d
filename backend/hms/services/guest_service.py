"""
Guest service - staff edits of guest details
"""
import logging

from hms.exceptions import NotFoundError, ValidationError
from hms.models.ontology import Guest
from hms.models.schemas import GuestUpdate
from hms.services.store import HotelStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "phone")


class GuestService:
    """Guest service"""

    def __init__(self, store: HotelStore):
        self.store = store

    def get_guest(self, guest_id: str) -> Guest:
        guest = self.store.get_guest(guest_id)
        if not guest:
            raise NotFoundError("guest", guest_id)
        return guest

    def update_guest(self, guest_id: str, data: GuestUpdate) -> Guest:
        """
        Correct a guest's details
        Name and phone may be changed but not cleared; other fields may be cleared.
        """
        guest = self.get_guest(guest_id)
        updates = data.model_dump(exclude_unset=True)
        for field in REQUIRED_FIELDS:
            if field in updates:
                value = (updates[field] or "").strip()
                if not value:
                    raise ValidationError(f"Guest {field} is required")
                updates[field] = value

        changes = {k: v for k, v in updates.items() if getattr(guest, k) != v}
        if not changes:
            return guest

        updated = self.store.update_guest(guest_id, changes)
        logger.info(f"Guest {guest_id} updated: {', '.join(sorted(changes))}")
        return updated
