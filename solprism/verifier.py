"""
SOLPRISM Verification

Enables any party holding a revealed reasoning trace to confirm it matches
the hash committed before the action, without access to the original
agent or its commitment store.

A mismatch is a result, not an exception: callers must treat a
non-matching trace as untrusted.
"""

import hmac
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .hashing import hash_trace
from .logging_config import CommitmentLogger
from .signing import verify_commitment_signature
from .trace import CommitmentResult


class VerificationOutcome(str, Enum):
    """
    MATCH: the trace reproduces the committed hash
    MISMATCH: the trace does not match; treat as untrusted
    INVALID_SIGNATURE: hash matches but the commitment signature is
        missing, unknown or invalid
    """
    MATCH = "MATCH"
    MISMATCH = "MISMATCH"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


@dataclass
class VerificationResult:
    """Result of verifying a trace or a commitment."""
    outcome: VerificationOutcome
    reason: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def is_valid(self) -> bool:
        return self.outcome == VerificationOutcome.MATCH

    @classmethod
    def match(cls, computed: str) -> 'VerificationResult':
        return cls(outcome=VerificationOutcome.MATCH, details={"computed": computed})

    @classmethod
    def mismatch(cls, computed: str, declared: Any) -> 'VerificationResult':
        return cls(
            outcome=VerificationOutcome.MISMATCH,
            reason="Trace hash mismatch",
            details={"computed": computed, "declared": declared},
        )

    @classmethod
    def invalid_signature(cls, reason: str, details: Dict[str, Any] = None) -> 'VerificationResult':
        return cls(outcome=VerificationOutcome.INVALID_SIGNATURE, reason=reason, details=details)


def _hashes_equal(computed: str, declared: Any) -> bool:
    if not isinstance(declared, str):
        return False
    return hmac.compare_digest(computed.encode('ascii'), declared.encode('utf-8'))


def verify_trace(declared_hash: str, trace: Any) -> bool:
    """
    Recompute the hash of ``trace`` and compare it to ``declared_hash``.

    ``trace`` may be a ReasoningTrace or its wire-form dict. Errors raised
    while canonicalizing propagate to the caller.
    """
    return _hashes_equal(hash_trace(trace), declared_hash)


class TraceVerifier:
    """
    Third-party verifier for revealed traces and exported commitments.

    Args:
        trusted_keys: Optional map of key_id -> base64 public key. When
            given, signatures must come from one of these keys.
        require_signature: Treat unsigned commitments as invalid
    """

    def __init__(
        self,
        trusted_keys: Optional[Dict[str, str]] = None,
        require_signature: bool = False,
        logger: Optional[CommitmentLogger] = None
    ):
        self.trusted_keys = trusted_keys
        self.require_signature = require_signature
        self.log = logger or CommitmentLogger()

    def verify(self, declared_hash: str, trace: Any) -> VerificationResult:
        """Verify a revealed trace against a previously committed hash."""
        computed = hash_trace(trace)
        if _hashes_equal(computed, declared_hash):
            return VerificationResult.match(computed)
        return VerificationResult.mismatch(computed, declared_hash)

    def verify_commitment(self, commitment: CommitmentResult) -> VerificationResult:
        """
        Verify a stored or exported commitment.

        Steps:
        1. Recompute the trace hash and compare with the stored hash
        2. Check the signature, when present or required
        """
        result = self.verify(commitment.hash, commitment.trace)
        if not result.is_valid():
            return result

        signature = commitment.signature
        if signature is None:
            if self.require_signature:
                return VerificationResult.invalid_signature("Commitment is not signed")
            return result

        trusted_key = None
        if self.trusted_keys is not None:
            trusted_key = self.trusted_keys.get(signature.key_id)
            if trusted_key is None:
                return VerificationResult.invalid_signature(
                    "Unknown signing key",
                    {"key_id": signature.key_id},
                )

        if not verify_commitment_signature(commitment, trusted_key=trusted_key):
            return VerificationResult.invalid_signature(
                "Signature verification failed",
                {"key_id": signature.key_id},
            )

        return result

    def audit(self, commitments: Iterable[CommitmentResult]) -> List[VerificationResult]:
        """Verify every commitment in a history, in order."""
        results = [self.verify_commitment(c) for c in commitments]
        failures = sum(1 for r in results if not r.is_valid())
        self.log.audit_summary(total=len(results), failures=failures)
        return results
