"""
Shared test fixtures.

Integration tests run against a file-backed SQLite database (one per test)
so that background tasks get their own connections, the way they do on
PostgreSQL.
"""

from datetime import UTC, datetime
from typing import Any

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fusioncaller.config import AppSettings, get_app_settings, set_app_settings
from fusioncaller.db import Base
from fusioncaller.db.agent_configs.model import AgentConfig
from fusioncaller.db.database import set_async_session_local
from fusioncaller.db.organizations.model import Organization
from fusioncaller.db.phone_numbers.model import PhoneNumber
from fusioncaller.integrations.vapi.call_control import TerminationResult, set_call_control
from fusioncaller.notifications.client import set_sms_client
from fusioncaller.utils.tasks import TaskRunner, set_task_runner

API_TOKEN = "test-api-token"
ORG_PHONE = "+14155550100"
CUSTOMER_PHONE = "+14155550199"


class FakeSMSClient:
    """Records messages instead of calling Twilio."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    @property
    def enabled(self) -> bool:
        return True

    async def send_sms(self, to: str, body: str) -> str:
        self.sent.append((to, body))
        return f"SM{len(self.sent):04d}"


class FakeCallControl:
    """Records termination attempts instead of calling Vapi."""

    def __init__(self):
        self.terminated: list[str] = []

    @property
    def enabled(self) -> bool:
        return True

    async def terminate_call(self, call_id: str) -> TerminationResult:
        self.terminated.append(call_id)
        return TerminationResult(attempted=True, terminated=True, method="delete")


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Fresh database per test, installed as the global session factory."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    set_async_session_local(factory)
    yield factory
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def sms_client():
    client = FakeSMSClient()
    set_sms_client(client)
    yield client
    set_sms_client(None)


@pytest.fixture
def call_control():
    control = FakeCallControl()
    set_call_control(control)
    yield control
    set_call_control(None)


@pytest_asyncio.fixture
async def task_runner():
    runner = TaskRunner()
    set_task_runner(runner)
    yield runner
    await runner.drain()
    set_task_runner(None)


@pytest.fixture
def api_settings():
    previous = get_app_settings()
    set_app_settings(AppSettings(api_token=API_TOKEN))
    yield
    set_app_settings(previous)


@pytest_asyncio.fixture
async def client(session_factory, sms_client, call_control, task_runner, api_settings):
    """HTTP client bound to the app, running on the test's event loop."""
    from fusioncaller.main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {API_TOKEN}"}


async def create_organization(factory, **fields: Any) -> Organization:
    """Insert an organization, with an org phone number unless ``phone=None``."""
    phone = fields.pop("phone", ORG_PHONE)
    assistant_ids = fields.pop("assistants", None)
    fields.setdefault("name", "Acme Roofing")

    async with factory() as session:
        org = Organization(**fields)
        session.add(org)
        await session.flush()
        if phone:
            session.add(PhoneNumber(organization_id=org.id, phone_number=phone))
        if assistant_ids:
            inbound, outbound = assistant_ids
            session.add(
                AgentConfig(
                    organization_id=org.id,
                    inbound_agent_id=inbound,
                    outbound_agent_id=outbound,
                )
            )
        await session.commit()
        return org


def vapi_payload(
    call_id: str | None,
    status: str | None = None,
    event_type: str = "status-update",
    direction: str = "outbound",
    customer: str = CUSTOMER_PHONE,
    phone: str = ORG_PHONE,
    metadata: dict[str, Any] | None = None,
    **message: Any,
) -> dict[str, Any]:
    """Build a Vapi server message envelope."""
    call: dict[str, Any] = {
        "type": "outboundPhoneCall" if direction == "outbound" else "inboundPhoneCall",
        "customer": {"number": customer},
        "phoneNumber": {"number": phone},
        "createdAt": datetime(2026, 3, 2, 15, 30, tzinfo=UTC).isoformat(),
    }
    if call_id:
        call["id"] = call_id
    if metadata:
        call["metadata"] = metadata

    body: dict[str, Any] = {"type": event_type, "call": call, **message}
    if status is not None:
        body["status"] = status
    return {"message": body}
