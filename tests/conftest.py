"""Shared pytest fixtures for test suite."""

import os

# Settings validate required secrets on load; give tests a harmless set
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")

import base64  # noqa: E402
import time  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from cryptography.hazmat.backends import default_backend  # noqa: E402
from cryptography.hazmat.primitives import serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402
from fastapi import Request  # noqa: E402
from jose import jwt  # noqa: E402

from moodjournal.models.entry import FactorImpact, MoodEntry  # noqa: E402

# Wednesday 2026-02-11 14:00 UTC; the week runs Mon 2026-02-09 .. Sun 2026-02-15
FIXED_NOW = datetime(2026, 2, 11, 14, 0, tzinfo=timezone.utc)


# =============================================================================
# Clock / Entry Fixtures
# =============================================================================


class FakeClock:
    """Settable clock for services that take a clock callable."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


def _build_entry(
    days_ago: int = 0,
    mood: float = 5.0,
    factors: dict | None = None,
    entry_id: str | None = None,
    hour: int = 12,
    note: str = "",
) -> MoodEntry:
    """Entry on FIXED_NOW's calendar day minus days_ago, at the given hour (UTC)."""
    day = (FIXED_NOW - timedelta(days=days_ago)).date()
    return MoodEntry(
        id=entry_id,
        date=datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc),
        mood_level=mood,
        factors={k: FactorImpact(v) for k, v in (factors or {}).items()},
        note=note,
    )


@pytest.fixture
def make_entry():
    """Factory for entries relative to FIXED_NOW."""
    return _build_entry


# =============================================================================
# RSA Key Fixtures (for RS256 JWT signing/verification)
# =============================================================================


@pytest.fixture(scope="session")
def rsa_key_pair():
    """RSA key pair for RS256 JWTs (session-scoped, generation is slow)."""
    private_key = rsa.generate_private_key(
        public_exponent=65537, key_size=2048, backend=default_backend()
    )
    return private_key, private_key.public_key()


@pytest.fixture(scope="session")
def rsa_private_key_pem(rsa_key_pair):
    private_key, _ = rsa_key_pair
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def jwks_key_id() -> str:
    return "test-key-id-001"


# =============================================================================
# JWT Token Fixtures
# =============================================================================


@pytest.fixture
def valid_jwt_claims():
    """Standard valid JWT claims for a Supabase authenticated user."""
    return {
        "sub": "auth-user-uuid-12345",
        "email": "testuser@example.com",
        "aud": "authenticated",
        "role": "authenticated",
        "iat": int(time.time()),
        "exp": int(time.time()) + 3600,
    }


def create_test_jwt(claims: dict, private_key_pem: bytes, kid: str) -> str:
    return jwt.encode(claims, private_key_pem, algorithm="RS256", headers={"kid": kid})


@pytest.fixture
def valid_jwt_token(valid_jwt_claims, rsa_private_key_pem, jwks_key_id):
    return create_test_jwt(valid_jwt_claims, rsa_private_key_pem, jwks_key_id)


@pytest.fixture
def expired_jwt_token(valid_jwt_claims, rsa_private_key_pem, jwks_key_id):
    claims = valid_jwt_claims.copy()
    claims["exp"] = int(time.time()) - 3600
    claims["iat"] = int(time.time()) - 7200
    return create_test_jwt(claims, rsa_private_key_pem, jwks_key_id)


@pytest.fixture
def wrong_audience_jwt_token(valid_jwt_claims, rsa_private_key_pem, jwks_key_id):
    claims = valid_jwt_claims.copy()
    claims["aud"] = "anon"
    return create_test_jwt(claims, rsa_private_key_pem, jwks_key_id)


# =============================================================================
# JWKS Cache Reset Fixture
# =============================================================================


@pytest.fixture(autouse=True)
def reset_jwks_cache():
    """Reset JWKS cache before each test to ensure isolation."""
    import moodjournal.core.auth as auth_module

    auth_module._jwks_cache.invalidate()
    yield
    auth_module._jwks_cache.invalidate()


# =============================================================================
# Mock Supabase Client
# =============================================================================


def make_table_mock():
    """Chainable table mock; every builder method returns the mock itself."""
    mock = MagicMock()
    for method in ("select", "eq", "order", "insert", "update", "delete", "single"):
        getattr(mock, method).return_value = mock
    mock.execute.return_value = MagicMock(data=[])
    return mock


@pytest.fixture
def mock_supabase():
    """Supabase client whose table() routes to per-name chainable mocks."""
    client = MagicMock()
    tables: dict[str, MagicMock] = {}

    def route(name):
        if name not in tables:
            tables[name] = make_table_mock()
        return tables[name]

    client.table.side_effect = route
    return client


@pytest.fixture(scope="session")
def test_jwks(rsa_key_pair, jwks_key_id):
    """JWKS built from the test RSA public key, shaped like Supabase's endpoint."""
    _, public_key = rsa_key_pair
    public_numbers = public_key.public_numbers()

    def int_to_base64url(value: int, length: int) -> str:
        value_bytes = value.to_bytes(length, byteorder="big")
        return base64.urlsafe_b64encode(value_bytes).rstrip(b"=").decode("ascii")

    return {
        "keys": [
            {
                "kty": "RSA",
                "use": "sig",
                "alg": "RS256",
                "kid": jwks_key_id,
                "n": int_to_base64url(public_numbers.n, 256),
                "e": int_to_base64url(public_numbers.e, 3),
            }
        ]
    }


# =============================================================================
# Mock Request Fixtures
# =============================================================================


@pytest.fixture
def mock_request():
    """Mock FastAPI Request object."""
    request = MagicMock(spec=Request)
    request.state = MagicMock()
    request.headers = {}
    return request


@pytest.fixture
def mock_request_authenticated(mock_request):
    """Request with an authenticated user in state (post-middleware)."""
    from moodjournal.core.auth import AuthOptionalUser

    mock_request.state.user = AuthOptionalUser(
        auth_id="auth-user-uuid-12345", email="testuser@example.com", is_authenticated=True
    )
    mock_request.state.token_error = None
    return mock_request


@pytest.fixture
def mock_request_with_token_error(mock_request):
    from moodjournal.core.auth import AuthOptionalUser

    mock_request.state.user = AuthOptionalUser(is_authenticated=False)
    mock_request.state.token_error = "Token expired"
    return mock_request
