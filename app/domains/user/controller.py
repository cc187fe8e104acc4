"""User profile controller endpoints."""

import logging

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_email_service, get_identity
from app.core.security import Identity
from app.database import get_db
from app.domains.user.service import UserService
from app.exceptions.base import EmailDeliveryError
from app.schemas.base import ResponseSchema
from app.schemas.user import ProfileCreateRequest, SendConfirmationRequest, UserResponse
from app.services.email_service import EmailService
from models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.get("/profile", response_model=ResponseSchema)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get the caller's local profile."""
    return ResponseSchema(
        status="success",
        message="User profile retrieved successfully",
        data=UserResponse.model_validate(current_user).model_dump(mode="json"),
    )


@router.post("/profile", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
async def create_profile(
    response: Response,
    payload: ProfileCreateRequest | None = Body(None),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Create the caller's local profile.

    Responds 201 when the profile is created and 200 when it already exists.
    """
    name = (payload.name if payload else None) or identity.display_name
    user, created = await UserService(db).create_profile(identity.email, name)

    if not created:
        response.status_code = status.HTTP_200_OK

    return ResponseSchema(
        status="success",
        message="User profile created successfully" if created else "User profile already exists",
        data=UserResponse.model_validate(user).model_dump(mode="json"),
    )


@router.post("/send-confirmation", response_model=ResponseSchema)
async def send_confirmation(
    payload: SendConfirmationRequest,
    email_service: EmailService = Depends(get_email_service),
):
    """Send the signup confirmation email. Does not require a token."""
    sent = await email_service.send_confirmation_email(str(payload.email), payload.name)
    if not sent:
        raise EmailDeliveryError()

    return ResponseSchema(
        status="success",
        message="Confirmation email sent successfully",
        data={"email": str(payload.email)},
    )
