# composition_service/test/use_cases/test_composition_use_cases.py

# pytest composition_service/test/use_cases/test_composition_use_cases.py -v
# pytest composition_service/test/use_cases/test_composition_use_cases.py::test_full_workflow_to_completed

from datetime import timedelta
from typing import List

import pytest
import pytest_asyncio

from composition_service.adapters.outbound.persistence.repositories.composition_repository import (
    composition_repository,
)
from composition_service.application.dtos.composition_dto import CompositionFieldUpdate
from composition_service.application.use_cases.composition_use_cases import AsyncCompositionService
from composition_service.domain.exceptions import (
    InvalidTransitionException,
    PermissionDeniedException,
    ResourceNotFoundException,
)
from composition_service.domain.models.composition import BelongingResult, CompositionStatus
from composition_service.domain.models.identity import Identity
from composition_service.shared.utils.datetime_utils import DateTimeUtil
from composition_service.test.conftest import RecordingDispatcher, create_interval, create_user


def as_identity(user) -> Identity:
    return Identity(subject_id=user.id, display_name=user.login, is_moderator=user.is_moderator)


@pytest.fixture
def service(db_session, dispatcher: RecordingDispatcher) -> AsyncCompositionService:
    return AsyncCompositionService(db_session, dispatcher)


@pytest_asyncio.fixture
async def creator(db_session) -> Identity:
    return as_identity(await create_user(db_session, login="creator"))


@pytest_asyncio.fixture
async def other_user(db_session) -> Identity:
    return as_identity(await create_user(db_session, login="other"))


@pytest_asyncio.fixture
async def moderator(db_session) -> Identity:
    return as_identity(await create_user(db_session, login="moderator", is_moderator=True))


@pytest_asyncio.fixture
async def intervals(db_session) -> List[int]:
    """Ids apenas: um rollback no serviço expira as instâncias da sessão compartilhada."""
    major_second = await create_interval(db_session, title="Major second", tone=2.0)
    augmented_fifth = await create_interval(db_session, title="Augmented fifth", tone=4.0)
    return [major_second.id, augmented_fifth.id]


async def formed_composition(service: AsyncCompositionService, owner: Identity, interval_id: int) -> int:
    added = await service.add_interval(owner, interval_id)
    await service.form(owner, added.composition_id)
    return added.composition_id


@pytest.mark.asyncio
async def test_add_interval_creates_single_draft(service, creator, intervals):
    """
    O primeiro intervalo cria o rascunho; os seguintes reutilizam o mesmo.
    """
    first = await service.add_interval(creator, intervals[0])
    second = await service.add_interval(creator, intervals[1], amount=3)

    assert first.composition_id == second.composition_id
    cart = await service.get_cart(creator)
    assert cart.composition_id == first.composition_id
    assert cart.item_count == 2


@pytest.mark.asyncio
async def test_adding_same_interval_overwrites_amount(service, db_session, creator, intervals):
    added = await service.add_interval(creator, intervals[0], amount=2)
    await service.add_interval(creator, intervals[0], amount=5)

    items = await composition_repository.list_items(db_session, added.composition_id)
    assert [(i.interval_id, i.amount) for i in items] == [(intervals[0], 5)]


@pytest.mark.asyncio
async def test_add_missing_or_deleted_interval(service, db_session, creator):
    deleted_id = (await create_interval(db_session, title="Gone", tone=1.0, is_deleted=True)).id

    with pytest.raises(ResourceNotFoundException):
        await service.add_interval(creator, 9999)
    with pytest.raises(ResourceNotFoundException):
        await service.add_interval(creator, deleted_id)

    assert (await service.get_cart(creator)).item_count == 0


@pytest.mark.asyncio
async def test_cart_without_draft(service, creator):
    cart = await service.get_cart(creator)
    assert cart.composition_id == 0
    assert cart.item_count == 0


@pytest.mark.asyncio
async def test_form_empty_draft_fails_and_keeps_status(service, db_session, creator, intervals):
    """
    Rascunho sem intervalos não pode ser formado; depois de um item, pode.
    """
    added = await service.add_interval(creator, intervals[0])
    await service.remove_item(creator, added.composition_id, intervals[0])

    with pytest.raises(InvalidTransitionException):
        await service.form(creator, added.composition_id)
    assert (await composition_repository.get(db_session, added.composition_id)).status == "Draft"

    await service.add_interval(creator, intervals[0], amount=1)
    formed = await service.form(creator, added.composition_id)
    assert formed.status == CompositionStatus.FORMED.value


@pytest.mark.asyncio
async def test_only_creator_can_form(service, creator, other_user, intervals):
    added = await service.add_interval(creator, intervals[0])

    with pytest.raises(PermissionDeniedException):
        await service.form(other_user, added.composition_id)


@pytest.mark.asyncio
async def test_full_workflow_to_completed(service, dispatcher, creator, moderator, intervals):
    composition_id = await formed_composition(service, creator, intervals[0])

    completed = await service.complete(moderator, composition_id)

    assert completed.status == CompositionStatus.COMPLETED.value
    assert completed.moderator_id == moderator.subject_id
    assert completed.date_finish is not None
    assert completed.belonging is None
    assert dispatcher.submitted == [composition_id]


@pytest.mark.asyncio
async def test_reject_keeps_belonging(service, db_session, creator, moderator, intervals):
    composition_id = await formed_composition(service, creator, intervals[0])
    await composition_repository.update_fields(
        db_session, composition_id, CompositionFieldUpdate(belonging=BelongingResult.BELONGS)
    )
    await db_session.commit()

    rejected = await service.reject(moderator, composition_id)

    assert rejected.status == CompositionStatus.REJECTED.value
    assert rejected.moderator_id == moderator.subject_id
    assert rejected.date_finish is not None
    assert rejected.belonging == "belongs"


@pytest.mark.asyncio
async def test_moderation_requires_moderator(service, creator, intervals):
    composition_id = await formed_composition(service, creator, intervals[0])

    with pytest.raises(PermissionDeniedException):
        await service.complete(creator, composition_id)
    with pytest.raises(PermissionDeniedException):
        await service.reject(creator, composition_id)


@pytest.mark.asyncio
async def test_illegal_transitions_leave_state_unchanged(service, db_session, dispatcher, creator, moderator,
                                                         intervals):
    """
    Draft -> Completed e Completed -> Rejected são recusados sem alterar nada.
    """
    draft = await service.add_interval(creator, intervals[0])
    with pytest.raises(InvalidTransitionException):
        await service.complete(moderator, draft.composition_id)
    assert (await composition_repository.get(db_session, draft.composition_id)).status == "Draft"
    assert dispatcher.submitted == []

    await service.form(creator, draft.composition_id)
    await service.complete(moderator, draft.composition_id)
    with pytest.raises(InvalidTransitionException):
        await service.reject(moderator, draft.composition_id)
    with pytest.raises(InvalidTransitionException):
        await service.form(creator, draft.composition_id)

    composition = await composition_repository.get(db_session, draft.composition_id)
    assert composition.status == "Completed"


@pytest.mark.asyncio
async def test_items_are_frozen_after_forming(service, creator, intervals):
    composition_id = await formed_composition(service, creator, intervals[0])

    with pytest.raises(InvalidTransitionException):
        await service.update_item_amount(creator, composition_id, intervals[0], 4)
    with pytest.raises(InvalidTransitionException):
        await service.remove_item(creator, composition_id, intervals[0])
    with pytest.raises(InvalidTransitionException):
        await service.update_title(creator, composition_id, "Too late")


@pytest.mark.asyncio
async def test_item_updates_in_draft(service, db_session, creator, other_user, intervals):
    added = await service.add_interval(creator, intervals[0])

    await service.update_item_amount(creator, added.composition_id, intervals[0], 4)
    item = await composition_repository.get_item(db_session, added.composition_id, intervals[0])
    assert item.amount == 4

    with pytest.raises(PermissionDeniedException):
        await service.update_item_amount(other_user, added.composition_id, intervals[0], 1)
    with pytest.raises(ResourceNotFoundException):
        await service.update_item_amount(creator, added.composition_id, intervals[1], 2)
    with pytest.raises(ResourceNotFoundException):
        await service.remove_item(creator, added.composition_id, intervals[1])


@pytest.mark.asyncio
async def test_update_title_touches_date_update(service, db_session, creator, intervals):
    added = await service.add_interval(creator, intervals[0])
    before = (await composition_repository.get(db_session, added.composition_id)).date_update

    updated = await service.update_title(creator, added.composition_id, "Étude nº 2")

    assert updated.title == "Étude nº 2"
    assert updated.date_update >= before


@pytest.mark.asyncio
async def test_delete_only_from_draft(service, db_session, creator, intervals):
    """
    Exclusão lógica: só rascunhos; itens removidos; depois some das leituras.
    """
    formed_id = await formed_composition(service, creator, intervals[0])
    with pytest.raises(InvalidTransitionException):
        await service.delete(creator, formed_id)
    assert (await composition_repository.get(db_session, formed_id)).status == "Formed"

    draft = await service.add_interval(creator, intervals[1])
    await service.delete(creator, draft.composition_id)

    assert (await composition_repository.get(db_session, draft.composition_id)).status == "Deleted"
    assert await composition_repository.count_items(db_session, draft.composition_id) == 0
    with pytest.raises(ResourceNotFoundException):
        await service.get_composition(creator, draft.composition_id)
    with pytest.raises(ResourceNotFoundException):
        await service.delete(creator, draft.composition_id)

    # novo rascunho depois da exclusão
    new_draft = await service.add_interval(creator, intervals[1])
    assert new_draft.composition_id != draft.composition_id


@pytest.mark.asyncio
async def test_listing_visibility(service, creator, other_user, moderator, intervals):
    """
    Usuário comum vê só as suas; moderador vê todas; Draft/Deleted nunca aparecem.
    """
    mine = await formed_composition(service, creator, intervals[0])
    theirs = await formed_composition(service, other_user, intervals[1])
    await service.add_interval(creator, intervals[1])

    assert [c.id for c in await service.list_compositions(creator)] == [mine]
    assert [c.id for c in await service.list_compositions(other_user)] == [theirs]
    assert [c.id for c in await service.list_compositions(moderator)] == [mine, theirs]

    await service.complete(moderator, mine)
    completed = await service.list_compositions(moderator, status=CompositionStatus.COMPLETED)
    assert [c.id for c in completed] == [mine]
    assert await service.list_compositions(creator, status=CompositionStatus.DRAFT) == []


@pytest.mark.asyncio
async def test_listing_date_filters(service, creator, intervals):
    composition_id = await formed_composition(service, creator, intervals[0])
    now = DateTimeUtil.utcnow()

    in_range = await service.list_compositions(creator, date_from=now - timedelta(hours=1),
                                               date_to=now + timedelta(hours=1))
    assert [c.id for c in in_range] == [composition_id]
    assert await service.list_compositions(creator, date_from=now + timedelta(hours=1)) == []


@pytest.mark.asyncio
async def test_detail_includes_affinity_score(service, creator, other_user, moderator, intervals):
    """
    Itens 2.0 x2 e 4.0 x1 -> média 2.667, score 0.867.
    """
    added = await service.add_interval(creator, intervals[0], amount=2)
    await service.add_interval(creator, intervals[1], amount=1)

    detail = await service.get_composition(creator, added.composition_id)

    assert [(i.interval_id, i.amount) for i in detail.intervals] == [(intervals[0], 2), (intervals[1], 1)]
    assert detail.intervals[0].title == "Major second"
    assert detail.mean_tone == 2.667
    assert detail.affinity_score == 0.867
    assert detail.status == CompositionStatus.DRAFT

    assert (await service.get_composition(moderator, added.composition_id)).id == added.composition_id
    with pytest.raises(PermissionDeniedException):
        await service.get_composition(other_user, added.composition_id)
