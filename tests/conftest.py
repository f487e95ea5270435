import sys
from decimal import Decimal
from pathlib import Path

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from arena_payments.clients.gateway_client import GatewayClient  # noqa: E402
from arena_payments.config import Modality  # noqa: E402
from arena_payments.database import init_db  # noqa: E402
from arena_payments.db import RecordStore  # noqa: E402
from arena_payments.schemas.domain import (  # noqa: E402
    Arena,
    Category,
    MemberCustomer,
    ProfileCustomer,
    Tournament,
    UserRef,
)


@pytest.fixture
def store(tmp_path):
    """
    Record store backed by a disposable SQLite file.
    """
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    init_db(engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield RecordStore(session_factory)
    engine.dispose()


@pytest.fixture
def mock_gateway():
    from mock_gateway import main as mock_main

    mock_main.reset_state()
    yield mock_main
    mock_main.reset_state()


@pytest.fixture
def configured_gateway(mock_gateway):
    mock_gateway.STATE["config"] = {"apiKey": "platform-key", "isSandbox": True}
    return mock_gateway


@pytest.fixture
def gateway_client(mock_gateway):
    transport = httpx.ASGITransport(app=mock_gateway.app)
    return GatewayClient(httpx.AsyncClient(transport=transport, base_url="http://mock-gateway/api/asaas/"))


@pytest.fixture
def arena():
    return Arena(id="arena-1", name="Arena Beach", asaas_api_key="arena-key")


@pytest.fixture
def arena_without_key():
    return Arena(id="arena-1", name="Arena Beach")


@pytest.fixture
def player_one():
    return UserRef(id="profile-1", name="Ana Souza", email="ana@example.com", phone="(11) 98888-7777")


@pytest.fixture
def player_two():
    return UserRef(id="profile-2", name="Bruno Lima", email="bruno@example.com", phone="11977776666")


@pytest.fixture
def member_one():
    return MemberCustomer(id="aluno-1", arena_id="arena-1", name="Ana Souza", email="ana@example.com", cpf="111.444.777-35")


@pytest.fixture
def member_two():
    return MemberCustomer(id="aluno-2", arena_id="arena-1", name="Bruno Lima", cpf="52998224725")


@pytest.fixture
def profile_customer():
    return ProfileCustomer(id="profile-9", name="Carla Dias", phone="11955554444", cpf_cnpj="11.222.333/0001-81")


@pytest.fixture
def make_tournament():
    def _make(modality=Modality.DUPLAS, fee=Decimal("50.00"), category_fee=None, max_participants=0):
        return Tournament(
            id="torneio-1",
            arena_id="arena-1",
            name="Open de Verão",
            modality=modality,
            registration_fee=fee,
            max_participants=max_participants,
            categories=[
                Category(id="cat-a", group="Misto", level="A", registration_fee=category_fee),
                Category(id="cat-b", group="Misto", level="B"),
            ],
        )
    return _make
