# composition_service/test/use_cases/test_interval_use_cases.py

# pytest composition_service/test/use_cases/test_interval_use_cases.py -v

import pytest
from fastapi_pagination import Params

from composition_service.application.dtos.interval_dto import IntervalCreate, IntervalUpdate
from composition_service.application.use_cases.interval_use_cases import AsyncIntervalService
from composition_service.domain.exceptions import ResourceNotFoundException, ValidationException


@pytest.fixture
def service(db_session) -> AsyncIntervalService:
    return AsyncIntervalService(db_session)


async def seed(service: AsyncIntervalService, count: int = 10):
    created = []
    for i in range(count):
        created.append(await service.create_interval(
            IntervalCreate(title=f"Interval {i}", description="", tone=0.5 * i)
        ))
    return created


@pytest.mark.asyncio
async def test_list_intervals_paginates(service):
    """
    Página de no máximo 8 itens, ordenada por id.
    """
    created = await seed(service)

    page_one = await service.list_intervals(Params(page=1, size=8))
    page_two = await service.list_intervals(Params(page=2, size=8))

    assert page_one.total == 10
    assert [i.id for i in page_one.items] == [c.id for c in created[:8]]
    assert [i.id for i in page_two.items] == [c.id for c in created[8:]]


@pytest.mark.asyncio
async def test_list_intervals_filters(service):
    await seed(service, 6)

    by_tone = await service.list_intervals(Params(page=1, size=8), tone_min=1.0, tone_max=2.0)
    assert [i.tone for i in by_tone.items] == [1.0, 1.5, 2.0]

    by_title = await service.list_intervals(Params(page=1, size=8), title="interval 3")
    assert [i.title for i in by_title.items] == ["Interval 3"]

    with pytest.raises(ValidationException):
        await service.list_intervals(Params(page=1, size=8), tone_min=3.0, tone_max=1.0)


@pytest.mark.asyncio
async def test_soft_deleted_interval_disappears(service):
    interval, *_ = await seed(service, 2)

    await service.delete_interval(interval.id)

    page = await service.list_intervals(Params(page=1, size=8))
    assert interval.id not in [i.id for i in page.items]
    with pytest.raises(ResourceNotFoundException):
        await service.get_interval(interval.id)
    with pytest.raises(ResourceNotFoundException):
        await service.delete_interval(interval.id)


@pytest.mark.asyncio
async def test_update_interval(service):
    interval, *_ = await seed(service, 1)

    updated = await service.update_interval(interval.id, IntervalUpdate(tone=2.5, title="Tritone"))

    assert updated.tone == 2.5
    assert updated.title == "Tritone"
    with pytest.raises(ResourceNotFoundException):
        await service.update_interval(9999, IntervalUpdate(tone=1.0))
