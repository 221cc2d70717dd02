"""
SOLPRISM Shield

Version: 1.0.0
License: Apache 2.0

Verifiable reasoning commitments for autonomous trading agents.

Before an agent acts, it serializes the reasoning behind the decision into
a ReasoningTrace, hashes the canonical encoding with SHA-256 and retains
the hash as a pre-commitment. Anyone later holding the revealed trace can
recompute the hash and confirm the reasoning was not written after the
fact.

Usage:
    from solprism import (
        SolprismShield,
        TradeDecision,
        PredictionStage,
        ScamCheckResult,
    )

    shield = SolprismShield(agent_name="my-agent-shield")

    commitment = shield.commit_trade_decision(TradeDecision(
        token_mint="So11111111111111111111111111111111111111112",
        action="buy",
        amount=1.5,
        prediction_stages=[
            PredictionStage("10min-confirm", True, 85, "Uptrend confirmed"),
        ],
        confidence=85,
    ))

    # Anchor commitment.hash externally, then execute the trade.

    assert shield.verify(commitment.hash, commitment.trace)
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

# Canonicalization and hashing
from .canonicalization import canonicalize, canonicalize_str
from .hashing import sha256_hex, hash_trace

# Trace data model
from .trace import (
    SOLPRISM_PROGRAM_ID,
    SCHEMA_VERSION,
    ReasoningTrace,
    TraceAction,
    DataSource,
    TraceInputs,
    AlternativeAction,
    TraceAnalysis,
    TraceDecision,
    TraceMetadata,
    CommitmentResult,
    CommitmentSignature,
    TraceFormatError,
    commitments_to_list,
    commitments_from_list,
)

# Decision inputs
from .decisions import (
    TradeAction,
    RiskLevel,
    PredictionStage,
    ScamCheckResult,
    CyclicSignal,
    TradeDecision,
    FirewallParams,
)

# Trace builders
from .builders import (
    create_trade_reasoning_trace,
    create_firewall_trace,
)

# Commitment store and manager
from .store import CommitmentStore, InMemoryCommitmentStore
from .shield import SolprismShield

# Verification
from .verifier import (
    TraceVerifier,
    VerificationResult,
    VerificationOutcome,
    verify_trace,
)

# Signing
from .signing import CommitmentSigner, verify_commitment_signature

# Logging
from .logging_config import CommitmentLogger, StructuredFormatter, configure_logging


__all__ = [
    # Version
    "__version__",

    # Canonicalization
    "canonicalize",
    "canonicalize_str",

    # Hashing
    "sha256_hex",
    "hash_trace",

    # Trace
    "SOLPRISM_PROGRAM_ID",
    "SCHEMA_VERSION",
    "ReasoningTrace",
    "TraceAction",
    "DataSource",
    "TraceInputs",
    "AlternativeAction",
    "TraceAnalysis",
    "TraceDecision",
    "TraceMetadata",
    "CommitmentResult",
    "CommitmentSignature",
    "TraceFormatError",
    "commitments_to_list",
    "commitments_from_list",

    # Decisions
    "TradeAction",
    "RiskLevel",
    "PredictionStage",
    "ScamCheckResult",
    "CyclicSignal",
    "TradeDecision",
    "FirewallParams",

    # Builders
    "create_trade_reasoning_trace",
    "create_firewall_trace",

    # Store and manager
    "CommitmentStore",
    "InMemoryCommitmentStore",
    "SolprismShield",

    # Verifier
    "TraceVerifier",
    "VerificationResult",
    "VerificationOutcome",
    "verify_trace",

    # Signing
    "CommitmentSigner",
    "verify_commitment_signature",

    # Logging
    "CommitmentLogger",
    "StructuredFormatter",
    "configure_logging",
]
