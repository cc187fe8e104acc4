"""Process-scoped service objects.

The container is built once by the application factory and stored on
``app.state.services``. Request handlers reach its members through the
dependency functions in :mod:`app.core.dependencies`.
"""

from dataclasses import dataclass

from app.core.config import Settings
from app.core.security import IdentityAuthenticator
from app.domains.ai.service import AIGateway
from app.services.email_service import EmailService


@dataclass
class ServiceContainer:
    identity: IdentityAuthenticator
    ai_gateway: AIGateway
    email: EmailService

    @classmethod
    def build(cls, config: Settings) -> "ServiceContainer":
        return cls(
            identity=IdentityAuthenticator(config),
            ai_gateway=AIGateway(config),
            email=EmailService(config),
        )
