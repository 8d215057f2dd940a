import pytest
from jose import jwt
from pydantic import ValidationError as SchemaError
from src.core.errors import AuthenticationError, ValidationError
from src.infrastructure.database.models import User
from src.infrastructure.database.repositories import UserRepository
from src.schemas.auth import LoginRequest, RegisterRequest
from src.services.auth_service import AuthService


@pytest.fixture
def service(db, test_settings):
    return AuthService(db, config=test_settings)


def _register(**overrides) -> RegisterRequest:
    fields = dict(
        username="ada",
        email="ada@example.com",
        password="correct-horse",
        confirm_password="correct-horse",
        first_name="Ada",
    )
    fields.update(overrides)
    return RegisterRequest(**fields)


@pytest.mark.asyncio
async def test_register_issues_jwt_and_hashes_password(service, db, test_settings):
    response = await service.register(_register())

    assert response.user.username == "ada"
    assert response.user.role == "user"
    assert response.expires_in == test_settings.jwt_expires_minutes * 60
    claims = jwt.decode(
        response.token,
        test_settings.jwt_secret_key,
        algorithms=[test_settings.jwt_algorithm],
    )
    assert claims["sub"] == "ada"
    assert claims["id"] == response.user.id
    assert claims["role"] == "user"
    assert "exp" in claims and "iat" in claims

    with db.session_scope() as session:
        stored = session.query(User).filter_by(username="ada").one()
        assert stored.password != "correct-horse"
        assert stored.password.startswith("$2")


@pytest.mark.asyncio
async def test_duplicate_username_or_email_rejected(service):
    await service.register(_register())
    with pytest.raises(ValidationError):
        await service.register(_register(email="other@example.com"))
    with pytest.raises(ValidationError):
        await service.register(_register(username="other"))


@pytest.mark.asyncio
async def test_login_round_trip(service):
    await service.register(_register())
    response = await service.login(
        LoginRequest(username="ada", password="correct-horse")
    )
    assert response.user.email == "ada@example.com"
    assert response.token_type == "bearer"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username,password", [("ada", "wrong-password"), ("nobody", "correct-horse")]
)
async def test_login_rejects_bad_credentials(service, username, password):
    await service.register(_register())
    with pytest.raises(AuthenticationError):
        await service.login(LoginRequest(username=username, password=password))


@pytest.mark.asyncio
async def test_login_rejects_disabled_account(service, db):
    await service.register(_register())
    with db.session_scope() as session:
        session.query(User).filter_by(username="ada").one().is_active = False
    with pytest.raises(AuthenticationError):
        await service.login(LoginRequest(username="ada", password="correct-horse"))


def test_mismatched_passwords_fail_validation():
    with pytest.raises(SchemaError):
        _register(confirm_password="something-else")


@pytest.mark.asyncio
async def test_concurrent_duplicate_surfaces_as_validation_error(
    service, monkeypatch
):
    await service.register(_register())
    # Both uniqueness checks pass, as for a registration racing the first one
    monkeypatch.setattr(UserRepository, "exists_by_username", lambda self, u: False)
    monkeypatch.setattr(UserRepository, "exists_by_email", lambda self, e: False)

    with pytest.raises(ValidationError):
        await service.register(_register())
