# composition_service/adapters/outbound/persistence/models/interval_model.py

from sqlalchemy import Column, Boolean, Integer, Numeric, String, Text

from composition_service.adapters.outbound.persistence.models.base_model import Base


class Interval(Base):
    """
    Item do catálogo. Nunca é removido fisicamente (is_deleted).
    """
    __tablename__ = "intervals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    tone = Column(Numeric(10, 1, asdecimal=False), nullable=False)
    photo_url = Column(String(512), nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)

    def __repr__(self):
        return f"<Interval(id={self.id}, title={self.title}, tone={self.tone})>"
