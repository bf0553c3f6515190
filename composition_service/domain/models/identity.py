# composition_service/domain/models/identity.py

"""
Modelos de domínio da identidade autenticada.

Representações puras, sem dependência de framework, do usuário extraído
de um token e das claims assinadas dentro dele.
"""

from dataclasses import dataclass
from datetime import datetime


ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


@dataclass(frozen=True)
class Identity:
    """Authenticated principal attached to a request."""
    subject_id: int
    display_name: str
    is_moderator: bool = False


@dataclass(frozen=True)
class TokenClaims:
    """
    Claims decoded from a verified token.

    Imutável depois de emitido; `token_type` distingue access de refresh.
    """
    subject_id: int
    display_name: str
    is_moderator: bool
    issued_at: datetime
    expires_at: datetime
    token_type: str = ACCESS_TOKEN
    token_id: str = ""

    def to_identity(self) -> Identity:
        return Identity(
            subject_id=self.subject_id,
            display_name=self.display_name,
            is_moderator=self.is_moderator,
        )
