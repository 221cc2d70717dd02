"""
SOLPRISM Commitment Manager

Wraps trade and firewall decisions with verifiable reasoning commitments.
Every decision is hashed before execution; the hash proves the agent
reasoned before it acted.

Usage:
    shield = SolprismShield(agent_name="my-agent-shield")

    decision = TradeDecision(
        token_mint="So11111111111111111111111111111111111111112",
        action="buy",
        amount=1.5,
        prediction_stages=[
            PredictionStage("10min-confirm", True, 85, "Uptrend confirmed"),
            PredictionStage("5min-validate", True, 78, "Secondary signal holds"),
            PredictionStage("10min-final", True, 82, "Third window passed"),
        ],
        scam_check=ScamCheckResult("So111...", False, ["liquidity", "holders"], "safe"),
        confidence=82,
    )

    # Before executing the trade:
    commitment = shield.commit_trade_decision(decision)
    publish(commitment.hash)

    # Execute the trade...

    # Later, anyone holding the revealed trace:
    assert shield.verify(commitment.hash, commitment.trace)
"""

from typing import Callable, List, Optional

from .builders import create_firewall_trace, create_trade_reasoning_trace
from .config import DEFAULT_AGENT_NAME, HASH_DISPLAY_LENGTH, SIGNING_KEY_PATH, signing_enabled
from .decisions import FirewallParams, TradeDecision
from .hashing import hash_trace, short_hash
from .logging_config import CommitmentLogger
from .signing import CommitmentSigner
from .store import CommitmentStore, InMemoryCommitmentStore
from .trace import CommitmentResult, ReasoningTrace, now_ms
from .verifier import verify_trace


class SolprismShield:
    """
    Session-scoped commitment manager.

    Owns one append-only commitment store. Independent shields never
    share history.

    Args:
        agent_name: Agent identity recorded in built traces and log records
        store: Commitment store (default: a fresh in-memory store)
        signer: Optional Ed25519 signer; when set every commitment is signed
        logger: Commitment logger
        clock: Returns the commit time in epoch milliseconds
        model: Optional model identifier recorded in built traces
        session_id: Optional session identifier recorded in built traces
    """

    def __init__(
        self,
        agent_name: Optional[str] = None,
        store: Optional[CommitmentStore] = None,
        signer: Optional[CommitmentSigner] = None,
        logger: Optional[CommitmentLogger] = None,
        clock: Optional[Callable[[], int]] = None,
        model: Optional[str] = None,
        session_id: Optional[str] = None
    ):
        self.agent_name = agent_name or DEFAULT_AGENT_NAME
        self.store = store if store is not None else InMemoryCommitmentStore()
        self.signer = signer
        self.log = logger or CommitmentLogger()
        self._clock = clock or now_ms
        self.model = model
        self.session_id = session_id

    @classmethod
    def from_config(cls, **kwargs) -> 'SolprismShield':
        """Build a shield from SOLPRISM_* environment configuration."""
        kwargs.setdefault("agent_name", DEFAULT_AGENT_NAME)
        if signing_enabled() and "signer" not in kwargs:
            kwargs["signer"] = CommitmentSigner.from_file(SIGNING_KEY_PATH)
        return cls(**kwargs)

    def commit(self, trace: ReasoningTrace) -> CommitmentResult:
        """
        Commit a reasoning trace and return the commitment.

        Call this BEFORE executing the action. Errors raised while
        canonicalizing the trace propagate and nothing is stored.
        """
        commitment_hash = hash_trace(trace)
        timestamp = self._clock()
        signature = self.signer.sign(commitment_hash, timestamp) if self.signer else None

        result = CommitmentResult(
            hash=commitment_hash,
            trace=trace,
            timestamp=timestamp,
            signature=signature,
        )
        self.store.append(result)

        self.log.commitment_recorded(
            agent=self.agent_name,
            action_type=trace.action.type,
            decision=trace.decision.action_chosen,
            confidence=trace.decision.confidence,
            hash_prefix=short_hash(commitment_hash, HASH_DISPLAY_LENGTH),
            signed=signature is not None,
        )
        return result

    def verify(self, commitment_hash: str, trace: ReasoningTrace) -> bool:
        """
        Verify a reasoning trace against a previously committed hash.

        Only the trace/hash correspondence is checked; the store is not
        consulted.
        """
        valid = verify_trace(commitment_hash, trace)
        self.log.verification_result(
            agent=self.agent_name,
            matched=valid,
            hash_prefix=short_hash(str(commitment_hash), HASH_DISPLAY_LENGTH),
        )
        return valid

    def get_commitments(self) -> List[CommitmentResult]:
        """All commitments in commit order, as a copy (for auditing)."""
        return self.store.snapshot()

    def commit_trade_decision(self, decision: TradeDecision) -> CommitmentResult:
        """Convenience: create a trade trace and commit it in one call."""
        trace = create_trade_reasoning_trace(
            decision,
            agent=self.agent_name,
            model=self.model,
            session_id=self.session_id,
        )
        return self.commit(trace)

    def commit_firewall_decision(self, params: FirewallParams) -> CommitmentResult:
        """Convenience: create a firewall trace and commit it in one call."""
        trace = create_firewall_trace(
            params,
            agent=self.agent_name,
            model=self.model,
            session_id=self.session_id,
        )
        return self.commit(trace)
