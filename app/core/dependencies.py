# app/core/dependencies.py
import hmac
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.container import ServiceContainer
from app.core.security import Identity, IdentityAuthenticator
from app.database import get_db
from app.domains.ai.service import AIGateway
from app.domains.user.service import UserService
from app.exceptions.base import UnauthorizedError, UserProfileNotFoundError
from app.services.email_service import EmailService
from models import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_identity_authenticator(request: Request) -> IdentityAuthenticator:
    return get_services(request).identity


def get_ai_gateway(request: Request) -> AIGateway:
    return get_services(request).ai_gateway


def get_email_service(request: Request) -> EmailService:
    return get_services(request).email


async def get_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    authenticator: IdentityAuthenticator = Depends(get_identity_authenticator),
) -> Identity:
    """Authenticate the bearer token with the identity provider.

    Returns:
        Identity: The authenticated identity

    Raises:
        UnauthorizedError: If the token is missing or rejected
    """
    if not credentials or not credentials.credentials:
        raise UnauthorizedError("Authentication token is required")

    identity = await authenticator.authenticate(credentials.credentials)
    request.state.identity_email = identity.email
    return identity


async def get_current_user(
    request: Request,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the local profile of the authenticated identity.

    Raises:
        UserProfileNotFoundError: If the identity has no local profile yet
    """
    user = await UserService(db).get_user_by_email(identity.email)
    if not user:
        raise UserProfileNotFoundError()

    request.state.user_id = user.id
    return user


async def get_or_create_current_user(
    request: Request,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the local profile, creating it from the identity on first use."""
    user = await UserService(db).get_or_create_user(identity)
    request.state.user_id = user.id
    return user


async def verify_cron_secret(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> None:
    """Guard batch-job triggers with the shared ``CRON_SECRET`` bearer token."""
    expected = settings.cron_secret
    supplied = credentials.credentials if credentials else ""
    if not expected or not hmac.compare_digest(supplied.encode(), expected.encode()):
        logger.warning("Rejected cron trigger with missing or wrong secret")
        raise UnauthorizedError()
