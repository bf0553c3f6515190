from composition_service.adapters.outbound.persistence.models.base_model import Base
from composition_service.adapters.outbound.persistence.models.user_model import User
from composition_service.adapters.outbound.persistence.models.interval_model import Interval
from composition_service.adapters.outbound.persistence.models.composition_model import (
    Composition,
    CompositionInterval,
)

__all__ = ["Base", "User", "Interval", "Composition", "CompositionInterval"]
