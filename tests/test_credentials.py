"""Tests for shared-access key and token validation."""
from datetime import datetime, timedelta, timezone
from urllib.parse import quote_plus

import pytest
from starlette.datastructures import Headers

from eventgrid_simulator.topics import Topic
from eventgrid_simulator.validation.credentials import (
    CredentialValidator,
    SasKeyVerifier,
    SasTokenVerifier,
    build_sas_token,
    parse_expiry,
    sign,
)
from eventgrid_simulator.validation.outcome import CREDENTIAL_INVALID, FailureKind

KEY = "abc123"
RESOURCE = "http://localhost:60101/api/events"
NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def fixed_clock():
    return NOW


@pytest.fixture
def topic():
    return Topic(name="orders", port=60101, key=KEY)


@pytest.fixture
def validator():
    return CredentialValidator(token_verifier=SasTokenVerifier(clock=fixed_clock))


class TestSasKey:
    def test_exact_match(self):
        assert SasKeyVerifier().verify(KEY, KEY) is True

    def test_case_sensitive(self):
        assert SasKeyVerifier().verify(KEY, KEY.upper()) is False

    def test_mismatch(self):
        assert SasKeyVerifier().verify(KEY, "abc1234") is False


class TestSasToken:
    def test_valid_token(self):
        token = build_sas_token(RESOURCE, NOW + timedelta(hours=1), KEY)
        assert SasTokenVerifier(clock=fixed_clock).verify(KEY, token) is True

    def test_wrong_key(self):
        token = build_sas_token(RESOURCE, NOW + timedelta(hours=1), "other-key")
        assert SasTokenVerifier(clock=fixed_clock).verify(KEY, token) is False

    def test_expired_token(self):
        token = build_sas_token(RESOURCE, NOW - timedelta(seconds=1), KEY)
        assert SasTokenVerifier(clock=fixed_clock).verify(KEY, token) is False

    def test_tampered_resource(self):
        token = build_sas_token(RESOURCE, NOW + timedelta(hours=1), KEY)
        tampered = token.replace(quote_plus(RESOURCE), quote_plus(RESOURCE + "x"))
        assert SasTokenVerifier(clock=fixed_clock).verify(KEY, tampered) is False

    def test_epoch_expiry(self):
        expiry = str(int((NOW + timedelta(minutes=5)).timestamp()))
        signature = sign(KEY, RESOURCE, expiry)
        token = f"r={quote_plus(RESOURCE)}&e={expiry}&s={quote_plus(signature)}"
        assert SasTokenVerifier(clock=fixed_clock).verify(KEY, token) is True

    @pytest.mark.parametrize("token", ["", "garbage", "r=a&e=b", "r=a&e=not-a-date&s=abc"])
    def test_malformed_tokens(self, token):
        assert SasTokenVerifier(clock=fixed_clock).verify(KEY, token) is False


def test_parse_expiry_formats():
    assert parse_expiry("10/19/2026 01:30:00 PM") == datetime(2026, 10, 19, 13, 30, tzinfo=timezone.utc)
    assert parse_expiry("2026-10-19T13:30:00Z") == datetime(2026, 10, 19, 13, 30, tzinfo=timezone.utc)
    assert parse_expiry("0") == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert parse_expiry("tomorrow") is None


class TestCredentialValidator:
    def test_topic_without_key_always_passes(self, validator):
        topic = Topic(name="open", port=60102)
        assert validator.validate(topic, Headers(headers={})).ok

    def test_blank_key_means_no_auth(self, validator):
        topic = Topic(name="open", port=60102, key="  ")
        assert validator.validate(topic, Headers(headers={})).ok

    def test_missing_credentials_rejected(self, validator, topic):
        outcome = validator.validate(topic, Headers(headers={}))
        assert outcome.kind is FailureKind.CREDENTIAL_INVALID
        assert outcome.status_code == 401
        assert outcome.message == CREDENTIAL_INVALID

    def test_sas_key_header(self, validator, topic):
        assert validator.validate(topic, Headers(headers={"aeg-sas-key": KEY})).ok

    def test_header_name_case_insensitive(self, validator, topic):
        assert validator.validate(topic, Headers(headers={"AEG-SAS-KEY": KEY})).ok

    def test_wrong_sas_key(self, validator, topic):
        assert not validator.validate(topic, Headers(headers={"aeg-sas-key": "nope"})).ok

    def test_sas_token_header(self, validator, topic):
        token = build_sas_token(RESOURCE, NOW + timedelta(hours=1), KEY)
        assert validator.validate(topic, Headers(headers={"aeg-sas-token": token})).ok

    def test_authorization_shared_access_signature(self, validator, topic):
        token = build_sas_token(RESOURCE, NOW + timedelta(hours=1), KEY)
        headers = Headers(headers={"Authorization": f"SharedAccessSignature {token}"})
        assert validator.validate(topic, headers).ok

    def test_either_credential_may_verify(self, validator, topic):
        token = build_sas_token(RESOURCE, NOW + timedelta(hours=1), KEY)
        headers = Headers(headers={"aeg-sas-key": "wrong", "aeg-sas-token": token})
        assert validator.validate(topic, headers).ok

    def test_pluggable_verifiers(self, topic):
        class AcceptAll:
            def verify(self, topic_key, supplied):
                return True

        validator = CredentialValidator(key_verifier=AcceptAll())
        assert validator.validate(topic, Headers(headers={"aeg-sas-key": "anything"})).ok
        # An empty credential is never offered to a verifier
        assert not validator.validate(topic, Headers(headers={"aeg-sas-key": ""})).ok
