from sqlalchemy import select
from sqlalchemy.orm import Session
from typing import Optional
from storefront.domain.models import User
from storefront.core.logging_config import get_logger
from .schemas import ClerkWebhookEvent

logger = get_logger(__name__)

def primary_email(event: ClerkWebhookEvent) -> Optional[str]:
    """Pick the address flagged as primary, falling back to the first one."""
    if not event.data or not event.data.email_addresses:
        return None
    addresses = event.data.email_addresses
    primary_id = event.data.primary_email_address_id
    if primary_id:
        for address in addresses:
            if address.id == primary_id and address.email_address:
                return address.email_address
    return addresses[0].email_address

class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_clerk_id(self, clerk_user_id: str) -> Optional[User]:
        return self.db.scalar(select(User).where(User.clerk_user_id == clerk_user_id))

    def provision(self, clerk_user_id: str, email: str) -> tuple[User, bool]:
        """Create the local user for an external identity.

        Returns the user and whether it was created; an identity that is
        already known is returned unchanged.
        """
        existing = self.get_by_clerk_id(clerk_user_id)
        if existing:
            logger.info(f"User for identity {clerk_user_id} already provisioned")
            return existing, False

        user = User(clerk_user_id=clerk_user_id, email=email)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Provisioned user {user.id} for identity {clerk_user_id}")
        return user, True
