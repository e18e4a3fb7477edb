"""
Request validation for the Event Grid endpoint:
- request classification
- shared-access key and token checks
- payload and event size limits
- event schema checks
- the pipeline that sequences them
"""

from .classifier import RequestKind, classify
from .credentials import (
    CredentialValidator,
    CredentialVerifier,
    SasKeyVerifier,
    SasTokenVerifier,
    build_sas_token,
)
from .outcome import FailureKind, ValidationOutcome
from .pipeline import PipelineResult, RequestDescriptor, ValidationPipeline, check_handshake
from .schema import decode_batch, validate_event, validate_events
from .size import SizeValidator, canonical_size

__all__ = [
    "RequestKind",
    "classify",
    "CredentialValidator",
    "CredentialVerifier",
    "SasKeyVerifier",
    "SasTokenVerifier",
    "build_sas_token",
    "FailureKind",
    "ValidationOutcome",
    "PipelineResult",
    "RequestDescriptor",
    "ValidationPipeline",
    "check_handshake",
    "decode_batch",
    "validate_event",
    "validate_events",
    "SizeValidator",
    "canonical_size",
]
