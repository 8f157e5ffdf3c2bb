"""Tests for magic link issuing and verification."""

from datetime import datetime, timedelta, timezone
from urllib.parse import urlsplit

import pytest

from app.auth.magic_link import MagicLinkPayload, MagicLinkService
from app.auth.session import Session
from app.auth.token_codec import TokenCodec
from app.core.errors import InvalidLinkError

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="module")
def codec() -> TokenCodec:
    return TokenCodec("magic-link-test-secret-0123456789abcdef0123")


@pytest.fixture
def service(codec: TokenCodec) -> MagicLinkService:
    return MagicLinkService(codec=codec, origin="https://recipes.example.com/")


def reason_of(excinfo: pytest.ExceptionInfo) -> str:
    return excinfo.value.reason


class TestIssue:
    def test_link_points_at_validation_endpoint(self, service: MagicLinkService) -> None:
        issued = service.issue("cook@example.com", now=NOW)

        parts = urlsplit(issued.url)
        assert f"{parts.scheme}://{parts.netloc}" == "https://recipes.example.com"
        assert parts.path == "/validate-magic-link"
        assert MagicLinkService.token_from_url(issued.url)

    def test_payload_carries_email_nonce_and_timestamp(self, service: MagicLinkService, codec: TokenCodec) -> None:
        issued = service.issue("cook@example.com", now=NOW)

        payload = codec.decode(MagicLinkService.token_from_url(issued.url))

        assert payload == {
            "email": "cook@example.com",
            "nonce": issued.nonce,
            "createdAt": NOW.isoformat(),
        }

    def test_every_link_gets_a_fresh_nonce(self, service: MagicLinkService) -> None:
        nonces = {service.issue("cook@example.com").nonce for _ in range(20)}
        assert len(nonces) == 20

    def test_token_from_url_without_parameter(self) -> None:
        assert MagicLinkService.token_from_url("https://recipes.example.com/validate-magic-link") is None


class TestVerify:
    def test_valid_link_returns_payload(self, service: MagicLinkService) -> None:
        issued = service.issue("cook@example.com", now=NOW)
        session = Session({"nonce": issued.nonce})

        payload = service.verify_url(issued.url, session, now=NOW + timedelta(minutes=3))

        assert payload.email == "cook@example.com"
        assert payload.nonce == issued.nonce
        assert payload.created_at == NOW

    def test_verify_does_not_touch_the_session(self, service: MagicLinkService) -> None:
        issued = service.issue("cook@example.com", now=NOW)
        session = Session({"nonce": issued.nonce})

        service.verify_url(issued.url, session, now=NOW)

        assert session.get("nonce") == issued.nonce
        assert not session.modified

    @pytest.mark.parametrize("token", (None, ""))
    def test_missing_parameter(self, service: MagicLinkService, token) -> None:
        with pytest.raises(InvalidLinkError) as excinfo:
            service.verify(token, Session())
        assert reason_of(excinfo) == "parameter absent"

    def test_tampered_token(self, service: MagicLinkService) -> None:
        issued = service.issue("cook@example.com", now=NOW)
        token = MagicLinkService.token_from_url(issued.url)

        with pytest.raises(InvalidLinkError) as excinfo:
            service.verify(token[:-6], Session({"nonce": issued.nonce}), now=NOW)
        assert reason_of(excinfo) == "malformed/tampered token"

    def test_token_from_another_secret(self, service: MagicLinkService) -> None:
        other = MagicLinkService(
            codec=TokenCodec("a-completely-different-secret-0123456789ab"),
            origin="https://recipes.example.com",
        )
        issued = other.issue("cook@example.com", now=NOW)

        with pytest.raises(InvalidLinkError) as excinfo:
            service.verify_url(issued.url, Session({"nonce": issued.nonce}), now=NOW)
        assert reason_of(excinfo) == "malformed/tampered token"

    @pytest.mark.parametrize(
        "payload",
        (
            ["cook@example.com", "nonce"],
            {"email": "cook@example.com", "createdAt": NOW.isoformat()},
            {"email": 42, "nonce": "n", "createdAt": NOW.isoformat()},
            {"email": "cook@example.com", "nonce": "n", "createdAt": 1760875200},
            {"email": "cook@example.com", "nonce": "n", "createdAt": "yesterday"},
        ),
    )
    def test_invalid_payload_shape(self, service: MagicLinkService, codec: TokenCodec, payload) -> None:
        with pytest.raises(InvalidLinkError) as excinfo:
            service.verify(codec.encode(payload), Session({"nonce": "n"}), now=NOW)
        assert reason_of(excinfo) == "invalid payload shape"

    def test_expired_link(self, service: MagicLinkService) -> None:
        issued = service.issue("cook@example.com", now=NOW)
        session = Session({"nonce": issued.nonce})

        with pytest.raises(InvalidLinkError) as excinfo:
            service.verify_url(issued.url, session, now=NOW + timedelta(minutes=10, seconds=1))
        assert reason_of(excinfo) == "expired"

    def test_link_is_valid_up_to_max_age(self, service: MagicLinkService) -> None:
        issued = service.issue("cook@example.com", now=NOW)
        session = Session({"nonce": issued.nonce})

        assert service.verify_url(issued.url, session, now=NOW + timedelta(minutes=10))

    def test_expiry_is_checked_before_nonce(self, service: MagicLinkService) -> None:
        issued = service.issue("cook@example.com", now=NOW)

        with pytest.raises(InvalidLinkError) as excinfo:
            service.verify_url(issued.url, Session(), now=NOW + timedelta(hours=1))
        assert reason_of(excinfo) == "expired"

    @pytest.mark.parametrize("session_data", ({}, {"nonce": "someone-elses-nonce"}))
    def test_nonce_mismatch(self, service: MagicLinkService, session_data: dict) -> None:
        issued = service.issue("cook@example.com", now=NOW)

        with pytest.raises(InvalidLinkError) as excinfo:
            service.verify_url(issued.url, Session(session_data), now=NOW)
        assert reason_of(excinfo) == "nonce mismatch"

    def test_custom_max_age(self, codec: TokenCodec) -> None:
        short = MagicLinkService(codec=codec, origin="https://recipes.example.com", max_age=timedelta(minutes=1))
        issued = short.issue("cook@example.com", now=NOW)

        with pytest.raises(InvalidLinkError):
            short.verify_url(issued.url, Session({"nonce": issued.nonce}), now=NOW + timedelta(minutes=2))

    def test_public_message_is_the_same_for_every_reason(self) -> None:
        errors = [InvalidLinkError(reason) for reason in ("expired", "nonce mismatch", "malformed/tampered token")]

        assert len({error.message for error in errors}) == 1
        assert all(error.status_code == 400 for error in errors)
        assert "nonce" not in errors[0].message


def test_naive_timestamp_is_read_as_utc() -> None:
    payload = MagicLinkPayload.model_validate(
        {"email": "cook@example.com", "nonce": "n", "createdAt": "2026-10-19T12:00:00"}
    )
    assert payload.created_at == NOW
