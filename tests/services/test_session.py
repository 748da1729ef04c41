"""Session credential tests."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from docwatch.config import DEFAULT_SESSION_SECRET
from docwatch.services import session as session_module
from docwatch.services.errors import SigningUnavailable, Unauthenticated
from docwatch.services.session import SessionIssuer, SessionValidator

SECRET = "k" * 48
T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
LIFETIME = timedelta(days=60)


@pytest.fixture
def issuer() -> SessionIssuer:
    return SessionIssuer(SECRET, lifetime=LIFETIME)


@pytest.fixture
def validator() -> SessionValidator:
    return SessionValidator(SECRET)


class TestRoundTrip:
    def test_issue_then_validate(self, issuer: SessionIssuer, validator: SessionValidator):
        credential = issuer.issue("someone@example.com", now=T0)
        assert validator.validate(credential, now=T0) == "someone@example.com"

    def test_claims(self, issuer: SessionIssuer):
        credential = issuer.issue("someone@example.com", now=T0)
        claims = jwt.get_unverified_claims(credential)

        assert claims["sub"] == "someone@example.com"
        assert claims["email"] == "someone@example.com"
        assert claims["iat"] == int(T0.timestamp())
        assert claims["exp"] == int((T0 + LIFETIME).timestamp())

    def test_valid_just_before_expiry(self, issuer: SessionIssuer, validator: SessionValidator):
        credential = issuer.issue("someone@example.com", now=T0)
        moment = T0 + LIFETIME - timedelta(seconds=1)
        assert validator.validate(credential, now=moment) == "someone@example.com"

    def test_invalid_at_expiry(self, issuer: SessionIssuer, validator: SessionValidator):
        credential = issuer.issue("someone@example.com", now=T0)
        with pytest.raises(Unauthenticated):
            validator.validate(credential, now=T0 + LIFETIME)

    def test_issue_is_repeatable(self, issuer: SessionIssuer, validator: SessionValidator):
        first = issuer.issue("someone@example.com", now=T0)
        second = issuer.issue("someone@example.com", now=T0 + timedelta(seconds=5))
        assert validator.validate(first, now=T0 + timedelta(seconds=5)) == "someone@example.com"
        assert validator.validate(second, now=T0 + timedelta(seconds=5)) == "someone@example.com"


class TestRejection:
    def test_every_single_character_change_is_rejected(
        self, issuer: SessionIssuer, validator: SessionValidator
    ):
        credential = issuer.issue("someone@example.com", now=T0)

        for i, char in enumerate(credential):
            replacement = "A" if char != "A" else "B"
            tampered = credential[:i] + replacement + credential[i + 1 :]
            with pytest.raises(Unauthenticated):
                validator.validate(tampered, now=T0)

    def test_wrong_key(self, issuer: SessionIssuer):
        credential = issuer.issue("someone@example.com", now=T0)
        with pytest.raises(Unauthenticated):
            SessionValidator("x" * 48).validate(credential, now=T0)

    def test_other_algorithm(self, validator: SessionValidator):
        forged = jwt.encode(
            {"sub": "someone@example.com", "exp": int((T0 + LIFETIME).timestamp())},
            SECRET,
            algorithm="HS512",
        )
        with pytest.raises(Unauthenticated):
            validator.validate(forged, now=T0)

    def test_alg_none(self, validator: SessionValidator):
        import base64
        import json

        def b64(data: dict) -> str:
            return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()

        forged = (
            f"{b64({'alg': 'none', 'typ': 'JWT'})}."
            f"{b64({'sub': 'someone@example.com', 'exp': int((T0 + LIFETIME).timestamp())})}."
        )
        with pytest.raises(Unauthenticated):
            validator.validate(forged, now=T0)

    @pytest.mark.parametrize("credential", [None, "", "garbage", "a.b.c", "é.é.é"])
    def test_malformed(self, validator: SessionValidator, credential):
        with pytest.raises(Unauthenticated):
            validator.validate(credential, now=T0)

    def test_missing_subject(self, validator: SessionValidator):
        credential = jwt.encode(
            {"exp": int((T0 + LIFETIME).timestamp())}, SECRET, algorithm="HS256"
        )
        with pytest.raises(Unauthenticated):
            validator.validate(credential, now=T0)

    def test_missing_expiry(self, validator: SessionValidator):
        credential = jwt.encode({"sub": "someone@example.com"}, SECRET, algorithm="HS256")
        with pytest.raises(Unauthenticated):
            validator.validate(credential, now=T0)


class TestSigningConfig:
    @pytest.mark.parametrize("secret", ["", "short", "x" * 31])
    def test_short_secret(self, secret: str):
        with pytest.raises(SigningUnavailable):
            SessionIssuer(secret)
        with pytest.raises(SigningUnavailable):
            SessionValidator(secret)

    def test_non_hmac_algorithm(self):
        with pytest.raises(SigningUnavailable):
            SessionIssuer(SECRET, algorithm="RS256")

    def test_default_secret_refused_in_production(self):
        with (
            patch.object(session_module.settings, "environment", "production"),
            patch.object(session_module.settings, "session_secret", DEFAULT_SESSION_SECRET),
        ):
            with pytest.raises(SigningUnavailable):
                session_module._configured_secret()

    def test_default_secret_allowed_outside_production(self):
        with patch.object(session_module.settings, "session_secret", DEFAULT_SESSION_SECRET):
            assert session_module._configured_secret() == DEFAULT_SESSION_SECRET
