from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from storefront.core.logging_config import get_logger
from storefront.infrastructure.db import get_db
from storefront.application.user_service import UserService, primary_email
from storefront.application.schemas import ClerkWebhookEvent, WebhookResult

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

@router.post("/clerk", response_model=WebhookResult, status_code=201)
def clerk_user_created(event: ClerkWebhookEvent, db: Session = Depends(get_db)):
    """Provision a local user from the identity provider's user.created event."""
    clerk_user_id = event.data.id if event.data else None
    email = primary_email(event)
    if not clerk_user_id or not email:
        raise HTTPException(status_code=400, detail="Missing Clerk user id or email in webhook payload")

    try:
        _, created = UserService(db).provision(clerk_user_id, email)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error handling Clerk webhook")
        raise HTTPException(status_code=500, detail="Failed to create user from Clerk webhook")

    if not created:
        return JSONResponse(status_code=200, content={"created": False})
    return WebhookResult(created=True)
