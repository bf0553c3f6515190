# composition_service/adapters/outbound/persistence/models/user_model.py

"""
Modelo de usuário.

Usuários criam composições; moderadores concluem ou rejeitam.
"""

from sqlalchemy import Column, Boolean, Integer, String, DateTime

from composition_service.adapters.outbound.persistence.models.base_model import Base
from composition_service.shared.utils.datetime_utils import DateTimeUtil


class User(Base):
    """
    Modelo de usuário do sistema.

    Attributes:
        id: Identificador do usuário
        login: Nome de login (único)
        password: Hash bcrypt da senha
        is_moderator: Indica se o usuário pode concluir/rejeitar composições
        created_at: Data e hora de criação
        updated_at: Data e hora da última atualização
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    login = Column(String(64), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    is_moderator = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=DateTimeUtil.utcnow_naive)
    updated_at = Column(DateTime, nullable=True, onupdate=DateTimeUtil.utcnow_naive)

    def __repr__(self):
        return f"<User(id={self.id}, login={self.login}, is_moderator={self.is_moderator})>"
