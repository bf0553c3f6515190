# composition_service/domain/services/composition_workflow.py

from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from composition_service.domain.exceptions import (
    InvalidTransitionException,
    PermissionDeniedException,
)
from composition_service.domain.models.composition import CompositionStatus, ToneSample
from composition_service.domain.models.identity import Identity

DEFAULT_REFERENCE_TONE = 2.82

# Transições permitidas: status atual -> status de destino
ALLOWED_TRANSITIONS: Dict[CompositionStatus, FrozenSet[CompositionStatus]] = {
    CompositionStatus.DRAFT: frozenset({CompositionStatus.FORMED, CompositionStatus.DELETED}),
    CompositionStatus.FORMED: frozenset({CompositionStatus.COMPLETED, CompositionStatus.REJECTED}),
    CompositionStatus.COMPLETED: frozenset(),
    CompositionStatus.REJECTED: frozenset(),
    CompositionStatus.DELETED: frozenset(),
}


class CompositionWorkflow:
    """
    Domain service for the composition state machine.

    Draft -> Formed -> {Completed, Rejected}; Draft -> Deleted.
    Every check raises before anything is written, so a refused operation
    never changes the stored state.
    """

    @staticmethod
    def can_transition(current: CompositionStatus, target: CompositionStatus) -> bool:
        return CompositionStatus(target) in ALLOWED_TRANSITIONS[CompositionStatus(current)]

    @classmethod
    def ensure_transition(cls, current: CompositionStatus, target: CompositionStatus, operation: str) -> None:
        """
        Raise InvalidTransitionException when `current -> target` is not allowed.
        """
        current = CompositionStatus(current)
        if not cls.can_transition(current, target):
            raise InvalidTransitionException(
                message=f"Cannot {operation} a composition with status {current.value}.",
                current_status=current.value,
                operation=operation,
            )

    @staticmethod
    def ensure_editable(current: CompositionStatus, operation: str) -> None:
        """Item and field edits are only allowed while the composition is a Draft."""
        current = CompositionStatus(current)
        if current is not CompositionStatus.DRAFT:
            raise InvalidTransitionException(
                message=f"Cannot {operation}: composition is {current.value}, not Draft.",
                current_status=current.value,
                operation=operation,
            )

    @staticmethod
    def ensure_creator(creator_id: int, identity: Identity) -> None:
        if creator_id != identity.subject_id:
            raise PermissionDeniedException(message="Only the creator can modify this composition.")

    @staticmethod
    def ensure_moderator(identity: Identity) -> None:
        if not identity.is_moderator:
            raise PermissionDeniedException(message="Moderator access required")

    @staticmethod
    def ensure_can_view(creator_id: int, identity: Identity) -> None:
        if not identity.is_moderator and creator_id != identity.subject_id:
            raise PermissionDeniedException(message="Access to this composition is not allowed.")

    @staticmethod
    def ensure_has_items(item_count: int) -> None:
        if item_count < 1:
            raise InvalidTransitionException(
                message="Cannot form a composition without intervals.",
                current_status=CompositionStatus.DRAFT.value,
                operation="form",
            )

    @staticmethod
    def visible_creator(identity: Identity) -> Optional[int]:
        """Creator filter for listings: None means every creator."""
        return None if identity.is_moderator else identity.subject_id


def affinity_score(
        samples: Iterable[ToneSample],
        reference_tone: float = DEFAULT_REFERENCE_TONE,
) -> Tuple[float, float]:
    """
    Weighted mean tone of the items and its closeness to the reference tone.

    mean = sum(tone * amount) / sum(amount)
    score = 1 / (1 + |mean - reference|)

    Returns (0.0, 0.0) when there is nothing to weigh.
    """
    weighted = 0.0
    total = 0
    for sample in samples:
        weighted += float(sample.tone) * sample.amount
        total += sample.amount

    if total <= 0:
        return 0.0, 0.0

    mean = weighted / total
    return mean, 1.0 / (1.0 + abs(mean - reference_tone))
