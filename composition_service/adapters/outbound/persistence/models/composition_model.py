# composition_service/adapters/outbound/persistence/models/composition_model.py

"""
Modelos de composição e da associação composição <-> intervalo.

Uma composição em `Draft` por criador, garantido por índice único parcial.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import relationship

from composition_service.adapters.outbound.persistence.models.base_model import Base
from composition_service.domain.models.composition import CompositionStatus
from composition_service.shared.utils.datetime_utils import DateTimeUtil

_DRAFT_ONLY = text(f"status = '{CompositionStatus.DRAFT.value}'")


class Composition(Base):
    """
    Pedido de composição montado a partir de intervalos do catálogo.

    Attributes:
        id: Identificador
        creator_id: Usuário que criou (imutável)
        moderator_id: Moderador que concluiu/rejeitou
        status: Draft, Formed, Completed, Rejected ou Deleted
        belonging: Resultado do cálculo externo ("belongs" / "does not belong")
        title: Título livre
        date_create: Criação (imutável)
        date_update: Última alteração de qualquer campo
        date_finish: Conclusão ou rejeição
    """
    __tablename__ = "compositions"
    __table_args__ = (
        Index(
            "uq_compositions_one_draft_per_creator",
            "creator_id",
            unique=True,
            postgresql_where=_DRAFT_ONLY,
            sqlite_where=_DRAFT_ONLY,
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    moderator_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    status = Column(String(20), nullable=False, default=CompositionStatus.DRAFT.value, index=True)
    belonging = Column(String(32), nullable=True)
    title = Column(String(255), nullable=True)
    date_create = Column(DateTime, nullable=False, default=DateTimeUtil.utcnow_naive)
    date_update = Column(DateTime, nullable=False, default=DateTimeUtil.utcnow_naive)
    date_finish = Column(DateTime, nullable=True)

    items = relationship(
        "CompositionInterval",
        back_populates="composition",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="CompositionInterval.interval_id",
    )

    def __repr__(self):
        return f"<Composition(id={self.id}, creator_id={self.creator_id}, status={self.status})>"


class CompositionInterval(Base):
    """Item de uma composição: intervalo e quantidade."""
    __tablename__ = "composition_intervals"
    __table_args__ = (
        CheckConstraint("amount >= 1", name="ck_composition_intervals_amount_positive"),
    )

    composition_id = Column(Integer, ForeignKey("compositions.id", ondelete="CASCADE"), primary_key=True)
    interval_id = Column(Integer, ForeignKey("intervals.id"), primary_key=True)
    amount = Column(Integer, nullable=False, default=1)

    composition = relationship("Composition", back_populates="items")
    interval = relationship("Interval", lazy="joined")

    def __repr__(self):
        return (
            f"<CompositionInterval(composition_id={self.composition_id}, "
            f"interval_id={self.interval_id}, amount={self.amount})>"
        )
