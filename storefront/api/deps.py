import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import Optional
from storefront.core_settings import Settings, get_settings
from storefront.core.logging_config import get_logger, set_request_context
from storefront.infrastructure.db import get_db
from storefront.infrastructure.payments import StripeGateway
from storefront.application.article_service import ArticleLinks
from storefront.application.user_service import UserService
from storefront.application.schemas import MAX_DB_INT
from storefront.domain.models import User

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "

def parse_id(raw: str, invalid_detail: str, missing_detail: str, invalid_status: int = 400) -> int:
    """Parse a path id; ids outside the column range cannot match a row."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise HTTPException(status_code=invalid_status, detail=invalid_detail)
    if not 1 <= value <= MAX_DB_INT:
        raise HTTPException(status_code=404, detail=missing_detail)
    return value

def get_links(request: Request) -> ArticleLinks:
    return ArticleLinks(f"{request.url.scheme}://{request.url.netloc}")

def get_payment_gateway(settings: Settings = Depends(get_settings)) -> StripeGateway:
    return StripeGateway(
        secret_key=settings.STRIPE_SECRET_KEY,
        publishable_key=settings.STRIPE_PUBLISHABLE_KEY,
        api_base=settings.STRIPE_API_BASE,
        api_version=settings.STRIPE_API_VERSION,
        timeout=settings.STRIPE_TIMEOUT,
    )

def decode_session_token(token: str, settings: Settings) -> Optional[dict]:
    """Verify an identity-provider session token; None when it is not acceptable."""
    if not settings.CLERK_JWT_KEY:
        logger.warning("CLERK_JWT_KEY is not configured; rejecting bearer token")
        return None
    key = settings.CLERK_JWT_KEY.replace("\\n", "\n")
    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=[settings.CLERK_JWT_ALG],
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError as e:
        logger.info(f"Rejected bearer credential: {e}")
        return None
    parties = settings.authorized_parties
    if parties and claims.get("azp") not in parties:
        logger.info(f"Rejected bearer credential from party {claims.get('azp')}")
        return None
    return claims

async def get_identity(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """Resolve the caller's external identity id from the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Could not find user")
    claims = decode_session_token(auth_header[len(BEARER_PREFIX):].strip(), settings)
    if not claims:
        raise HTTPException(status_code=401, detail="Could not find user")
    identity = claims["sub"]
    set_request_context(user_id=identity)
    return identity

def get_current_user(identity: str = Depends(get_identity), db: Session = Depends(get_db)) -> User:
    user = UserService(db).get_by_clerk_id(identity)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
