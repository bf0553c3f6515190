# composition_service/test/conftest.py

import os

# Configuração de teste antes de importar a aplicação
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import timedelta
from typing import Dict, List, Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from composition_service.adapters.configuration.config import Settings
from composition_service.adapters.outbound.persistence.database import DatabaseSessionManager
from composition_service.adapters.outbound.persistence.models import Interval, User
from composition_service.adapters.outbound.security.password_manager import PasswordManager
from composition_service.adapters.outbound.security.token_codec import TokenCodec
from composition_service.application.ports.outbound.calculation_port import ICalculationDispatcher
from composition_service.application.ports.outbound.session_store_port import ISessionStore
from composition_service.application.use_cases.auth_gate import AuthGate
from composition_service.domain.exceptions import SessionStoreUnavailableException
from composition_service.main import create_app

TEST_PASSWORD = "TestPassword123"
TEST_JWT_SECRET = "test-secret-key"
TEST_CALCULATOR_KEY = "test-calculator-key"


class InMemorySessionStore(ISessionStore):
    """
    Session store em memória para os testes.

    `unavailable = True` simula um Redis configurado que parou de responder.
    """

    def __init__(self, enabled: bool = True):
        self._enabled = enabled
        self.unavailable = False
        self.blacklist: Dict[str, timedelta] = {}
        self.refresh_tokens: Dict[int, str] = {}
        self.sessions: Dict[int, Dict[str, str]] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _check(self) -> bool:
        if self.unavailable:
            raise SessionStoreUnavailableException(message="Session store unavailable.")
        return self._enabled

    async def connect(self) -> bool:
        return self._enabled

    async def close(self) -> None:
        self._enabled = False

    async def add_to_blacklist(self, token: str, ttl: timedelta) -> None:
        if self._check() and ttl > timedelta(0):
            self.blacklist[token] = ttl

    async def is_blacklisted(self, token: str) -> bool:
        return self._check() and token in self.blacklist

    async def save_refresh_token(self, user_id: int, token: str, ttl: timedelta) -> None:
        if self._check():
            self.refresh_tokens[user_id] = token

    async def get_refresh_token(self, user_id: int) -> Optional[str]:
        return self.refresh_tokens.get(user_id) if self._check() else None

    async def delete_refresh_token(self, user_id: int) -> None:
        if self._check():
            self.refresh_tokens.pop(user_id, None)

    async def save_user_session(self, user_id: int, data: Dict[str, str], ttl: timedelta) -> None:
        if self._check():
            self.sessions[user_id] = {k: str(v).lower() if isinstance(v, bool) else str(v) for k, v in data.items()}

    async def get_user_session(self, user_id: int) -> Dict[str, str]:
        return dict(self.sessions.get(user_id, {})) if self._check() else {}

    async def delete_user_session(self, user_id: int) -> None:
        if self._check():
            self.sessions.pop(user_id, None)


class RecordingDispatcher(ICalculationDispatcher):
    """Guarda os ids enviados para a calculadora em vez de fazer HTTP."""

    def __init__(self):
        self.submitted: List[int] = []

    def submit(self, composition_id: int) -> None:
        self.submitted.append(composition_id)

    async def shutdown(self) -> None:
        pass


########################################################################
# Componentes
########################################################################


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        REDIS_ENABLED=False,
        ENVIRONMENT="testing",
        LOG_LEVEL="WARNING",
        JWT_SECRET=TEST_JWT_SECRET,
        CALCULATOR_API_KEY=TEST_CALCULATOR_KEY,
        CALCULATOR_URL="http://calculator.test/api/calculate-belonging/",
    )


@pytest.fixture
def token_codec(settings: Settings) -> TokenCodec:
    return TokenCodec.from_settings(settings)


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


########################################################################
# Banco de dados (SQLite em memória, um por teste)
########################################################################


@pytest_asyncio.fixture
async def db_manager():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.create_all()
    try:
        yield manager
    finally:
        await manager.dispose()


@pytest_asyncio.fixture
async def db_session(db_manager: DatabaseSessionManager):
    async with db_manager.session() as session:
        yield session


async def create_user(db_session, login: Optional[str] = None, is_moderator: bool = False) -> User:
    user = User(
        login=login or f"user-{uuid4().hex[:8]}",
        password=await PasswordManager.hash_password(TEST_PASSWORD),
        is_moderator=is_moderator,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


async def create_interval(db_session, title: str = "Perfect fifth", tone: float = 3.5,
                          is_deleted: bool = False) -> Interval:
    interval = Interval(title=title, description="", tone=tone, is_deleted=is_deleted)
    db_session.add(interval)
    await db_session.commit()
    await db_session.refresh(interval)
    return interval


@pytest_asyncio.fixture
async def test_user(db_session) -> User:
    return await create_user(db_session)


@pytest_asyncio.fixture
async def test_moderator(db_session) -> User:
    return await create_user(db_session, is_moderator=True)


########################################################################
# Aplicação + cliente HTTP
########################################################################


@pytest_asyncio.fixture
async def app(settings: Settings, session_store: InMemorySessionStore, dispatcher: RecordingDispatcher):
    application = create_app(settings)
    application.state.session_store = session_store
    application.state.auth_gate = AuthGate(application.state.token_codec, session_store)
    application.state.calculation_dispatcher = dispatcher
    await application.state.db_manager.create_all()
    try:
        yield application
    finally:
        await application.state.db_manager.dispose()


@pytest_asyncio.fixture
async def async_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


async def register_and_login(client: AsyncClient, login: Optional[str] = None,
                             is_moderator: bool = False) -> dict:
    """
    Registra um usuário pela API e retorna o corpo do login (tokens + user_id).
    """
    login = login or f"user-{uuid4().hex[:8]}"
    response_register = await client.post(
        "/api/v1/users/register",
        json={"login": login, "password": TEST_PASSWORD, "is_moderator": is_moderator},
    )
    assert response_register.status_code == 201, f"Erro ao registrar usuário: {response_register.text}"

    response_login = await client.post(
        "/api/v1/users/login",
        json={"login": login, "password": TEST_PASSWORD},
    )
    assert response_login.status_code == 200, f"Erro ao fazer login: {response_login.text}"
    return response_login.json()


def auth_headers(tokens: dict) -> dict:
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def user_tokens(async_client: AsyncClient) -> dict:
    return await register_and_login(async_client)


@pytest_asyncio.fixture
async def moderator_tokens(async_client: AsyncClient) -> dict:
    return await register_and_login(async_client, is_moderator=True)


@pytest_asyncio.fixture
async def catalog(app) -> List[int]:
    """Três intervalos no catálogo da aplicação: ids em ordem de criação."""
    ids = []
    async with app.state.db_manager.session() as session:
        for title, tone in (("Minor third", 1.5), ("Major third", 2.0), ("Perfect fifth", 3.5)):
            ids.append((await create_interval(session, title=title, tone=tone)).id)
    return ids
