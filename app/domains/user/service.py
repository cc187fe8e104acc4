# app/domains/user/service.py
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import Identity
from models import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> User | None:
        """Get a user by email address."""
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create_user(self, email: str, name: str | None = None, avatar: str | None = None) -> User:
        """Create a new user."""
        user = User(email=email, name=name, avatar=avatar)

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            logger.info("Created user profile %s", user.id)
            return user
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def get_or_create_user(self, identity: Identity) -> User:
        """Get existing user or create a new one from the identity metadata."""
        user = await self.get_user_by_email(identity.email)
        if user:
            return user

        try:
            return await self.create_user(
                email=identity.email,
                name=identity.display_name,
                avatar=identity.avatar_url,
            )
        except IntegrityError:
            # A concurrent request created the profile first
            user = await self.get_user_by_email(identity.email)
            if user is None:
                raise
            return user

    async def create_profile(self, email: str, name: str | None = None) -> tuple[User, bool]:
        """Create a profile unless one exists. Returns the user and whether it was created."""
        user = await self.get_user_by_email(email)
        if user:
            return user, False
        return await self.create_user(email=email, name=name or "User"), True
