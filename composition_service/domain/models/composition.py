# composition_service/domain/models/composition.py

"""
Modelo de domínio para Composition.

Define os status do fluxo de trabalho e as entradas usadas no cálculo
de afinidade, sem dependências de persistência.
"""

from dataclasses import dataclass
from enum import Enum


class CompositionStatus(str, Enum):
    DRAFT = "Draft"
    FORMED = "Formed"
    COMPLETED = "Completed"
    REJECTED = "Rejected"
    DELETED = "Deleted"


class BelongingResult(str, Enum):
    """Classification reported back by the external calculator."""
    BELONGS = "belongs"
    DOES_NOT_BELONG = "does not belong"


# Status que nunca aparecem na listagem
HIDDEN_FROM_LISTING = (CompositionStatus.DRAFT, CompositionStatus.DELETED)


@dataclass(frozen=True)
class ToneSample:
    """One item of a composition as seen by the affinity score."""
    tone: float
    amount: int
