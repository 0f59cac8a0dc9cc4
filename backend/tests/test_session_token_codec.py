"""
Unit tests for SessionTokenCodec.

Run with: pytest tests/test_session_token_codec.py -v
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from chatrelay.domain.exceptions import AuthError, AuthErrorReason
from chatrelay.services.session_token_codec import SessionTokenCodec
from conftest import TEST_SECRET, make_identity


def _codec(secret=TEST_SECRET, clock=None, audience="chatrelay-clients"):
    return SessionTokenCodec(
        secret=secret,
        issuer="chatrelay",
        audience=audience,
        ttl_seconds=3600,
        clock=clock,
    )


def _two_hours_ago():
    return datetime.now(timezone.utc) - timedelta(hours=2)


class TestIssueAndVerify:
    def test_verify_returns_issuing_user(self):
        codec = _codec()
        identity = make_identity()

        assert codec.verify(codec.issue(identity)) == identity.id

    def test_token_carries_expected_claims(self):
        codec = _codec()
        identity = make_identity(display_name="Alice A.")

        claims = jwt.decode(
            codec.issue(identity),
            TEST_SECRET,
            algorithms=["HS256"],
            audience="chatrelay-clients",
        )
        assert claims["sub"] == identity.id.value
        assert claims["name"] == "Alice A."
        assert claims["iss"] == "chatrelay"
        assert claims["exp"] - claims["iat"] == 3600

    def test_ttl_seconds(self):
        assert _codec().ttl_seconds == 3600


class TestRejections:
    def test_expired_token(self):
        token = _codec(clock=_two_hours_ago).issue(make_identity())

        with pytest.raises(AuthError) as exc:
            _codec().verify(token)
        assert exc.value.reason == AuthErrorReason.EXPIRED

    def test_wrong_secret_is_bad_signature(self):
        token = _codec(secret="other-secret").issue(make_identity())

        with pytest.raises(AuthError) as exc:
            _codec().verify(token)
        assert exc.value.reason == AuthErrorReason.BAD_SIGNATURE

    def test_forged_expired_token_is_bad_signature(self):
        """Signature is checked before expiry."""
        token = _codec(secret="other-secret", clock=_two_hours_ago).issue(make_identity())

        with pytest.raises(AuthError) as exc:
            _codec().verify(token)
        assert exc.value.reason == AuthErrorReason.BAD_SIGNATURE

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
    def test_garbage_is_malformed(self, token):
        with pytest.raises(AuthError) as exc:
            _codec().verify(token)
        assert exc.value.reason == AuthErrorReason.MALFORMED

    def test_wrong_audience_is_malformed(self):
        token = _codec(audience="someone-else").issue(make_identity())

        with pytest.raises(AuthError) as exc:
            _codec().verify(token)
        assert exc.value.reason == AuthErrorReason.MALFORMED

    def test_subject_must_be_a_user_id(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "sub": "not-a-uuid",
                "iat": now,
                "exp": now + timedelta(minutes=5),
                "iss": "chatrelay",
                "aud": "chatrelay-clients",
            },
            TEST_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(AuthError) as exc:
            _codec().verify(token)
        assert exc.value.reason == AuthErrorReason.MALFORMED


def test_empty_secret_is_rejected():
    with pytest.raises(ValueError):
        SessionTokenCodec(secret="", issuer="i", audience="a", ttl_seconds=60)
