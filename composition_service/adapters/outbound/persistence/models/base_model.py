# composition_service/adapters/outbound/persistence/models/base_model.py

"""
Base class for SQLAlchemy models.
"""

import logging

from sqlalchemy import event
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base declarativa para todos os modelos."""


def _hash_plain_password(mapper, connection, target) -> None:
    """
    Hook ORM (before_insert/before_update): nunca grava senha em texto plano.
    """
    from composition_service.adapters.outbound.security.password_manager import PasswordManager

    password = getattr(target, "password", None)
    if password and not PasswordManager.is_hashed(password):
        logger.warning(
            f"Plain text password detected on {target.__class__.__name__}. Hashing before saving."
        )
        target.password = PasswordManager.crypt_context.hash(password)


def register_password_protection() -> None:
    """
    Registra o hook de senha em todos os modelos que tenham o campo `password`.
    """
    for mapper in Base.registry.mappers:
        model = mapper.class_
        if hasattr(model, "password") and not event.contains(model, "before_insert", _hash_plain_password):
            event.listen(model, "before_insert", _hash_plain_password)
            event.listen(model, "before_update", _hash_plain_password)
