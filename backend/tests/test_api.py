import pytest
from fastapi.testclient import TestClient

from synapse.exceptions import StoreError
from synapse.verification.otp import OTPService
from synapse.verification.store import InMemoryStore

from backend.app.api import routes_users
from backend.app.config import AppConfig
from backend.app.dependencies import get_generator, get_otp_service


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


# -------------------- Users --------------------


def test_register_and_login(client):
    register = client.post(
        "/api/users/",
        json={"email": "Grace@Example.com", "password": "hopper"},
    )
    assert register.status_code == 201
    body = register.json()
    assert body["message"] == "User registered successfully."
    assert body["email"] == "grace@example.com"
    assert body["hasSeenTutorial"] is False
    assert body["token"]

    login = client.post(
        "/api/users/login",
        json={"email": "grace@example.com", "password": "hopper"},
    )
    assert login.status_code == 200
    assert login.json()["email"] == "grace@example.com"
    assert login.json()["id"]


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"email": "", "password": "x"}, "Email and password are required"),
        ({"email": "not-an-email", "password": "x"}, "Please enter a valid email address"),
    ],
)
def test_register_rejects_bad_input(client, payload, message):
    response = client.post("/api/users/", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": message, "type": "VALIDATION"}


def test_register_rejects_duplicate(client, token):
    response = client.post(
        "/api/users/",
        json={"email": "ada@example.com", "password": "other"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "User already exists"


def test_login_with_wrong_password(client, token):
    response = client.post(
        "/api/users/login",
        json={"email": "ada@example.com", "password": "wrong"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password", "type": "AUTHENTICATION"}


def test_malformed_body_is_a_validation_error(client):
    response = client.post("/api/users/login", content="not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json()["type"] == "VALIDATION"
    assert "details" in response.json()


def test_protected_routes_need_a_token(client):
    assert client.get("/api/history/").json()["error"] == "Not authorized, no token"
    bad = client.get("/api/history/", headers={"Authorization": "Bearer nonsense"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "Not authorized, token failed"


def test_token_for_deleted_user_is_rejected(client, headers):
    assert client.delete("/api/users/profile", headers=headers).json() == {"message": "User removed"}

    response = client.patch("/api/users/tutorial", headers=headers)
    assert response.status_code == 401
    assert response.json()["error"] == "Not authorized, user not found"


def test_mark_tutorial_seen(client, headers):
    response = client.patch("/api/users/tutorial", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Tutorial marked as seen", "hasSeenTutorial": True}

    login = client.post("/api/users/login", json={"email": "ada@example.com", "password": "s3cret!"})
    assert login.json()["hasSeenTutorial"] is True


def test_reset_password_in_development(client, token):
    response = client.post(
        "/api/users/reset-password",
        json={"email": "ada@example.com", "newPassword": "brand-new"},
    )
    assert response.status_code == 200

    old = client.post("/api/users/login", json={"email": "ada@example.com", "password": "s3cret!"})
    new = client.post("/api/users/login", json={"email": "ada@example.com", "password": "brand-new"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_reset_password_unknown_user(client):
    response = client.post(
        "/api/users/reset-password",
        json={"email": "ghost@example.com", "newPassword": "x"},
    )
    assert response.status_code == 404
    assert response.json()["error"] == "User not found."


def test_clear_all_users(client, token):
    response = client.delete("/api/users/clear-all")
    assert response.status_code == 200
    login = client.post("/api/users/login", json={"email": "ada@example.com", "password": "s3cret!"})
    assert login.status_code == 401


def test_send_and_verify_email(client, mailer):
    sent = client.post("/api/users/send-verification", json={"email": "ada@example.com"})
    assert sent.status_code == 200
    assert sent.json() == {"message": "Verification email sent successfully"}
    assert "123456" in mailer.sent[0]["text"]

    wrong = client.post("/api/users/verify-email", json={"email": "ada@example.com", "otp": "000000"})
    assert wrong.status_code == 400
    assert wrong.json()["error"] == "Invalid verification code"

    ok = client.post("/api/users/verify-email", json={"email": "ada@example.com", "otp": "123456"})
    assert ok.status_code == 200
    assert ok.json() == {"message": "Email verified successfully"}


def test_verify_email_requires_fields(client):
    response = client.post("/api/users/verify-email", json={"email": "ada@example.com"})
    assert response.status_code == 400
    assert response.json()["error"] == "Email and OTP are required"


class UnreachableStore(InMemoryStore):
    def put(self, key, value, ttl=None):
        raise StoreError(f"Failed to write {key}")


def test_store_outage_is_a_network_error(client, mailer):
    client.app.dependency_overrides[get_otp_service] = lambda: OTPService(
        store=UnreachableStore(), mailer=mailer
    )

    response = client.post("/api/users/send-verification", json={"email": "ada@example.com"})

    assert response.status_code == 503
    assert response.json() == {"error": "Verification service unavailable", "type": "NETWORK"}
    assert mailer.sent == []


def test_concurrent_duplicate_registration_is_rejected(client, token, monkeypatch):
    # Both requests pass the lookup; the unique email constraint decides.
    monkeypatch.setattr(routes_users, "_find_user", lambda db, email: None)

    response = client.post(
        "/api/users/",
        json={"email": "ada@example.com", "password": "other"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "User already exists", "type": "CONFLICT"}


def test_unexpected_error_keeps_the_error_body(client, headers):
    def _missing_key():
        raise ValueError("GEMINI_API_KEY is not set")

    client.app.dependency_overrides[get_generator] = _missing_key
    quiet = TestClient(client.app, raise_server_exceptions=False)

    response = quiet.post("/api/graph/generate", data={"textInput": "hello"}, headers=headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error", "type": "UNKNOWN"}


class TestProductionMode:
    @pytest.fixture()
    def app_config(self) -> AppConfig:
        return AppConfig(
            environment="production",
            jwt_secret="test-secret",
            database_url="sqlite://",
            redis_url="",
            require_email_verification=True,
        )

    def test_dev_only_routes_are_forbidden(self, client):
        reset = client.post(
            "/api/users/reset-password",
            json={"email": "ada@example.com", "newPassword": "x"},
        )
        clear = client.delete("/api/users/clear-all")

        assert reset.status_code == 403
        assert clear.status_code == 403
        assert clear.json()["type"] == "AUTHORIZATION"

    def test_registration_requires_verified_email(self, client, otp_service):
        payload = {"email": "ada@example.com", "password": "s3cret!"}

        refused = client.post("/api/users/", json=payload)
        assert refused.status_code == 403

        client.post("/api/users/send-verification", json={"email": "ada@example.com"})
        client.post("/api/users/verify-email", json={"email": "ada@example.com", "otp": "123456"})

        accepted = client.post("/api/users/", json=payload)
        assert accepted.status_code == 201
        assert not otp_service.is_verified("ada@example.com")
