import pytest
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.context import AppContext
from app.core.database import Database
from app.core.exceptions import UpstreamError
from app.main import create_app
from app.schemas.chat import CompletionResult, CompletionUsage
from app.services.supabase_service import SupabaseService

JWT_SECRET = "test-jwt-secret"
JWT_AUDIENCE = "authenticated"


class FakeCompletions:
    """Stands in for the OpenAI client: records every call, answers deterministically"""

    is_configured = True

    def __init__(self):
        self.calls = []
        self.fail_with = None

    async def request_completion(self, turns, *, model, temperature, max_tokens):
        self.calls.append({
            "turns": [(t.role.value, t.content) for t in turns],
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.fail_with is not None:
            raise self.fail_with
        n = len(self.calls)
        return CompletionResult(
            content=f"Reply {n}",
            usage=CompletionUsage(prompt_tokens=10 * n, completion_tokens=5, total_tokens=10 * n + 5),
            model=model,
            finish_reason="stop",
        )

    def fail(self, detail="OpenAI API error: boom"):
        self.fail_with = UpstreamError(detail)

    async def aclose(self):
        pass


def make_token(sub: str, email: str = "") -> str:
    claims = {"sub": sub, "aud": JWT_AUDIENCE, "role": "authenticated"}
    if email:
        claims["email"] = email
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")


def auth_headers(sub: str, email: str = "") -> dict:
    return {"Authorization": f"Bearer {make_token(sub, email)}"}


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        database_url="sqlite+aiosqlite://",
        supabase_url="",
        supabase_key="",
        jwt_secret_key=JWT_SECRET,
        jwt_audience=JWT_AUDIENCE,
        openai_api_key="",
    )


@pytest.fixture
async def database(settings):
    db = Database(
        settings.database_url,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.init_db()
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def completions():
    return FakeCompletions()


@pytest.fixture
def context(settings, database, completions):
    return AppContext(
        settings=settings,
        database=database,
        supabase=SupabaseService("", ""),
        completions=completions,
    )


@pytest.fixture
def app(context):
    return create_app(context=context)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def alice():
    return auth_headers("alice-subject", "alice@example.com")


@pytest.fixture
def bob():
    return auth_headers("bob-subject", "bob@example.com")
