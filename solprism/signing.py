"""
SOLPRISM Commitment Signing

Uses Ed25519 (RFC 8032) so a commitment hash is attributable to the agent
key that produced it. The signed payload is the canonical encoding of
``{"hash", "key_id", "timestamp"}``.
"""

import base64
import json
import os
from typing import Any, Dict, Optional

from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import SigningKey, VerifyKey

from .canonicalization import canonicalize
from .trace import CommitmentResult, CommitmentSignature

ALGORITHM = "Ed25519"


def _b64e(b: bytes) -> str:
    return base64.b64encode(b).decode('ascii')


def _b64d(s: str) -> bytes:
    return base64.b64decode(s.encode('ascii'), validate=True)


def signing_payload(key_id: str, commitment_hash: str, timestamp: int) -> bytes:
    """Canonical bytes covered by a commitment signature."""
    return canonicalize({"hash": commitment_hash, "key_id": key_id, "timestamp": timestamp})


class CommitmentSigner:
    """
    Ed25519 signer held by a SolprismShield.

    Usage:
        signer = CommitmentSigner.generate("kid:agentshield-001")
        shield = SolprismShield(agent_name="AgentShield", signer=signer)
        result = shield.commit(trace)
        assert verify_commitment_signature(result)
    """

    def __init__(self, key_id: str, signing_key: SigningKey):
        self.key_id = key_id
        self._signing_key = signing_key

    @classmethod
    def generate(cls, key_id: str) -> 'CommitmentSigner':
        """Generate a fresh key pair."""
        return cls(key_id, SigningKey.generate())

    @classmethod
    def from_seed(cls, key_id: str, seed: bytes) -> 'CommitmentSigner':
        """Recreate a signer from its 32-byte seed."""
        return cls(key_id, SigningKey(seed))

    @classmethod
    def from_file(cls, path: str) -> 'CommitmentSigner':
        """Load a key file written by ``save``."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_seed(data["key_id"], _b64d(data["seed"]))

    @property
    def public_key(self) -> str:
        """Base64-encoded verify key."""
        return _b64e(bytes(self._signing_key.verify_key))

    def to_key_file(self) -> Dict[str, Any]:
        return {
            "key_id": self.key_id,
            "algorithm": ALGORITHM,
            "public_key": self.public_key,
            "seed": _b64e(bytes(self._signing_key)),
        }

    def save(self, path: str) -> None:
        """Write the key file, readable by the owner only."""
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(self.to_key_file(), f, indent=2)

    def sign(self, commitment_hash: str, timestamp: int) -> CommitmentSignature:
        """Sign a commitment and return its signature record."""
        signed = self._signing_key.sign(signing_payload(self.key_id, commitment_hash, timestamp))
        return CommitmentSignature(
            key_id=self.key_id,
            algorithm=ALGORITHM,
            public_key=self.public_key,
            sig=_b64e(signed.signature),
        )


def verify_commitment_signature(
    commitment: CommitmentResult,
    trusted_key: Optional[str] = None
) -> bool:
    """
    Verify the Ed25519 signature attached to a commitment.

    Args:
        commitment: The commitment to check
        trusted_key: Base64 public key to require; when omitted the key
            embedded in the signature is used

    Returns:
        True if the signature is present and valid, False otherwise
    """
    signature = commitment.signature
    if signature is None or signature.algorithm != ALGORITHM:
        return False

    if trusted_key is not None and trusted_key != signature.public_key:
        return False

    payload = signing_payload(signature.key_id, commitment.hash, commitment.timestamp)

    try:
        verify_key = VerifyKey(_b64d(signature.public_key))
        verify_key.verify(payload, _b64d(signature.sig))
        return True
    except (BadSignatureError, CryptoError, ValueError, TypeError):
        return False
