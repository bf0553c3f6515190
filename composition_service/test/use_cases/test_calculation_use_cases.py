# composition_service/test/use_cases/test_calculation_use_cases.py

# pytest composition_service/test/use_cases/test_calculation_use_cases.py -v

import pytest
import pytest_asyncio

from composition_service.adapters.outbound.persistence.repositories.composition_repository import (
    composition_repository,
)
from composition_service.application.use_cases.calculation_use_cases import AsyncCalculationService
from composition_service.domain.exceptions import (
    ResourceNotFoundException,
    UnauthorizedException,
    ValidationException,
)
from composition_service.test.conftest import create_user

API_KEY = "calculator-key"


@pytest.fixture
def service(db_session) -> AsyncCalculationService:
    return AsyncCalculationService(db_session, API_KEY)


@pytest_asyncio.fixture
async def composition(db_session):
    user = await create_user(db_session)
    draft = await composition_repository.get_or_create_draft(db_session, user.id)
    await db_session.commit()
    return draft


@pytest.mark.asyncio
async def test_result_is_stored(service, db_session, composition):
    before = composition.date_update

    output = await service.receive_result(composition.id, "belongs", API_KEY)

    assert output.success is True
    assert output.result == "belongs"
    stored = await composition_repository.get(db_session, composition.id)
    assert stored.belonging == "belongs"
    assert stored.date_update >= before


@pytest.mark.asyncio
async def test_repeated_callback_is_idempotent(service, db_session, composition):
    await service.receive_result(composition.id, "does not belong", API_KEY)
    await service.receive_result(composition.id, "does not belong", API_KEY)

    stored = await composition_repository.get(db_session, composition.id)
    assert stored.belonging == "does not belong"


@pytest.mark.asyncio
async def test_wrong_key_is_rejected_before_anything_else(service, db_session, composition):
    """
    Chave errada -> 401 mesmo com resultado inválido ou id inexistente.
    """
    with pytest.raises(UnauthorizedException):
        await service.receive_result(composition.id, "belongs", "wrong-key")
    with pytest.raises(UnauthorizedException):
        await service.receive_result(9999, "maybe", "")

    stored = await composition_repository.get(db_session, composition.id)
    assert stored.belonging is None


@pytest.mark.asyncio
async def test_invalid_result_value(service):
    with pytest.raises(ValidationException):
        await service.receive_result(1, "maybe", API_KEY)


@pytest.mark.asyncio
async def test_unknown_composition(service):
    with pytest.raises(ResourceNotFoundException):
        await service.receive_result(9999, "belongs", API_KEY)


@pytest.mark.asyncio
async def test_empty_configured_key_rejects_every_callback(db_session, composition):
    service = AsyncCalculationService(db_session, "")

    with pytest.raises(UnauthorizedException):
        await service.receive_result(composition.id, "belongs", "")


@pytest.mark.asyncio
async def test_malformed_values_after_key_check(service, db_session, composition):
    """
    Tipos errados só são verificados depois da chave.
    """
    with pytest.raises(UnauthorizedException):
        await service.receive_result("abc", 5, None)
    with pytest.raises(ValidationException):
        await service.receive_result("abc", "belongs", API_KEY)
    with pytest.raises(ValidationException):
        await service.receive_result(True, "belongs", API_KEY)
    with pytest.raises(ValidationException):
        await service.receive_result(composition.id, None, API_KEY)

    output = await service.receive_result(str(composition.id), "belongs", API_KEY)
    assert output.composition_id == composition.id
    stored = await composition_repository.get(db_session, composition.id)
    assert stored.belonging == "belongs"
