"""
Shared-access credential checks for topics that have a key configured.

Two credential kinds are accepted:
- aeg-sas-key: the raw topic key, compared exactly
- aeg-sas-token (or "Authorization: SharedAccessSignature <token>"): a
  signed token of the form ``r=<resource>&e=<expiry>&s=<signature>`` where
  the signature is base64(HMAC-SHA256(key, "r=<resource>&e=<expiry>"))
  over the URL-encoded resource and expiry

Each kind is a CredentialVerifier; a request passes when any supplied
credential verifies against the topic key.
"""
import base64
import secrets
from datetime import datetime, timezone
from typing import Callable, Iterable, Protocol, Sequence
from urllib.parse import parse_qsl, quote_plus

import structlog
from cryptography.hazmat.primitives import hashes, hmac
from starlette.datastructures import Headers

from ..topics import Topic
from .outcome import CREDENTIAL_INVALID, FailureKind, ValidationOutcome

log = structlog.get_logger()

SAS_KEY_HEADER = "aeg-sas-key"
SAS_TOKEN_HEADER = "aeg-sas-token"
AUTHORIZATION_HEADER = "authorization"
SAS_AUTHORIZATION_SCHEME = "SharedAccessSignature"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialVerifier(Protocol):
    """Verifies one supplied credential against a topic key."""

    def verify(self, topic_key: str, supplied: str) -> bool:
        ...


class SasKeyVerifier:
    """Raw shared key; must equal the topic key exactly."""

    def verify(self, topic_key: str, supplied: str) -> bool:
        return secrets.compare_digest(supplied.encode("utf-8"), topic_key.encode("utf-8"))


def sign(key: str, resource: str, expiry: str) -> str:
    """Compute the base64 signature for a resource/expiry pair."""
    mac = hmac.HMAC(key.encode("utf-8"), hashes.SHA256())
    mac.update(f"r={quote_plus(resource)}&e={quote_plus(expiry)}".encode("utf-8"))
    return base64.b64encode(mac.finalize()).decode("ascii")


def build_sas_token(resource: str, expires_at: datetime, key: str) -> str:
    """
    Build an aeg-sas-token accepted by SasTokenVerifier.

    Args:
        resource: Topic endpoint URL the token is scoped to
        expires_at: Expiry instant; naive datetimes are taken as UTC
        key: Topic key used to sign the token

    Returns:
        URL-encoded token string
    """
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    expiry = expires_at.astimezone(timezone.utc).strftime("%m/%d/%Y %I:%M:%S %p")
    signature = sign(key, resource, expiry)
    return f"r={quote_plus(resource)}&e={quote_plus(expiry)}&s={quote_plus(signature)}"


def parse_expiry(value: str) -> datetime | None:
    """Parse a token expiry: Unix seconds, ISO 8601, or M/D/YYYY h:mm:ss AM|PM (UTC)."""
    value = value.strip()
    if not value:
        return None
    if value.isdigit():
        try:
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    for parse in (
        lambda v: datetime.strptime(v, "%m/%d/%Y %I:%M:%S %p"),
        lambda v: datetime.fromisoformat(v.replace("Z", "+00:00")),
    ):
        try:
            parsed = parse(value)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


class SasTokenVerifier:
    """Signed token; signature must match the topic key and expiry must not have passed."""

    def __init__(self, clock: Clock = utcnow):
        self._clock = clock

    def verify(self, topic_key: str, supplied: str) -> bool:
        fields = dict(parse_qsl(supplied.strip(), keep_blank_values=True))
        resource = fields.get("r")
        expiry = fields.get("e")
        signature = fields.get("s")
        if not resource or not expiry or not signature:
            log.debug("sas_token.malformed")
            return False

        expires_at = parse_expiry(expiry)
        if expires_at is None:
            log.debug("sas_token.bad_expiry", expiry=expiry)
            return False
        if expires_at <= self._clock():
            log.debug("sas_token.expired", expires_at=expires_at.isoformat())
            return False

        expected = sign(topic_key, resource, expiry)
        return secrets.compare_digest(expected.encode("ascii"), signature.encode("ascii", "replace"))


def _authorization_tokens(headers: Headers) -> Iterable[str]:
    prefix = SAS_AUTHORIZATION_SCHEME.lower() + " "
    for value in headers.getlist(AUTHORIZATION_HEADER):
        if value.lower().startswith(prefix):
            yield value[len(prefix):]


class CredentialValidator:
    """
    Checks the credentials carried in request headers against a topic key.

    Topics without a key accept every request.
    """

    def __init__(
        self,
        key_verifier: CredentialVerifier | None = None,
        token_verifier: CredentialVerifier | None = None,
    ):
        self._key_verifier = key_verifier or SasKeyVerifier()
        self._token_verifier = token_verifier or SasTokenVerifier()

    def _candidates(self, headers: Headers) -> Sequence[tuple[CredentialVerifier, str]]:
        candidates = [(self._key_verifier, v) for v in headers.getlist(SAS_KEY_HEADER)]
        candidates += [(self._token_verifier, v) for v in headers.getlist(SAS_TOKEN_HEADER)]
        candidates += [(self._token_verifier, v) for v in _authorization_tokens(headers)]
        return candidates

    def validate(self, topic: Topic, headers: Headers) -> ValidationOutcome:
        if not topic.requires_auth:
            log.debug("auth.skipped", topic=topic.name, reason="no_key_configured")
            return ValidationOutcome.SUCCESS

        for verifier, supplied in self._candidates(headers):
            if supplied and verifier.verify(topic.key, supplied):
                log.debug("auth.success", topic=topic.name, credential=type(verifier).__name__)
                return ValidationOutcome.SUCCESS

        log.warning("auth.failed", topic=topic.name)
        return ValidationOutcome.failure(FailureKind.CREDENTIAL_INVALID, CREDENTIAL_INVALID)
