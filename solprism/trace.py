"""
SOLPRISM Reasoning Trace Data Model

The canonical evidence record an agent commits to before acting, and the
commitment result binding a hash to that record.

All types are frozen dataclasses; sequences are held as tuples so a trace
cannot change after it has been hashed. The wire form produced by
``to_dict`` uses the camelCase keys of the SOLPRISM schema and omits
optional fields that are absent.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

SOLPRISM_PROGRAM_ID = "CZcvoryaQNrtZ3qb3gC1h9opcYpzEP1D9Mu1RVwFQeBu"
SCHEMA_VERSION = "1.0.0"

Scalar = Union[str, int, float, bool]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TraceFormatError(ValueError):
    """Raised when a wire dict cannot be parsed into a trace type."""


def _require(data: Mapping[str, Any], fields: Iterable[str], where: str) -> None:
    if not isinstance(data, Mapping):
        raise TraceFormatError(f"{where} must be an object, got {type(data).__name__}")
    missing = [f for f in fields if f not in data]
    if missing:
        raise TraceFormatError(f"{where}: missing required fields: {missing}")


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def as_utc(dt: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to already be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    """Convert a datetime to integer milliseconds since the epoch."""
    return (as_utc(dt) - _EPOCH) // timedelta(milliseconds=1)


def iso_utc(dt: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return as_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class TraceAction:
    """What the agent did: a machine-readable type plus a description."""
    type: str
    description: str
    transaction_signature: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "type": self.type,
            "description": self.description,
        }
        if self.transaction_signature is not None:
            d["transactionSignature"] = self.transaction_signature
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TraceAction':
        _require(data, ["type", "description"], "action")
        return cls(
            type=data["type"],
            description=data["description"],
            transaction_signature=data.get("transactionSignature"),
        )


@dataclass(frozen=True)
class DataSource:
    """Summary of one data source consulted for the decision."""
    name: str
    type: str
    queried_at: str
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "queriedAt": self.queried_at,
            "summary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'DataSource':
        _require(data, ["name", "type", "queriedAt", "summary"], "dataSource")
        return cls(
            name=data["name"],
            type=data["type"],
            queried_at=data["queriedAt"],
            summary=data["summary"],
        )


@dataclass(frozen=True)
class TraceInputs:
    data_sources: Tuple[DataSource, ...]
    context: str

    def __post_init__(self):
        object.__setattr__(self, "data_sources", tuple(self.data_sources))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataSources": [ds.to_dict() for ds in self.data_sources],
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TraceInputs':
        _require(data, ["dataSources", "context"], "inputs")
        return cls(
            data_sources=tuple(DataSource.from_dict(ds) for ds in data["dataSources"]),
            context=data["context"],
        )


@dataclass(frozen=True)
class AlternativeAction:
    """An action the agent considered and the reason it was rejected."""
    action: str
    reason_rejected: str

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action, "reasonRejected": self.reason_rejected}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'AlternativeAction':
        _require(data, ["action", "reasonRejected"], "alternativesConsidered[]")
        return cls(action=data["action"], reason_rejected=data["reasonRejected"])


@dataclass(frozen=True)
class TraceAnalysis:
    observations: Tuple[str, ...]
    logic: str
    alternatives_considered: Tuple[AlternativeAction, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "observations", tuple(self.observations))
        object.__setattr__(self, "alternatives_considered", tuple(self.alternatives_considered))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "observations": list(self.observations),
            "logic": self.logic,
            "alternativesConsidered": [a.to_dict() for a in self.alternatives_considered],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TraceAnalysis':
        _require(data, ["observations", "logic", "alternativesConsidered"], "analysis")
        return cls(
            observations=tuple(data["observations"]),
            logic=data["logic"],
            alternatives_considered=tuple(
                AlternativeAction.from_dict(a) for a in data["alternativesConsidered"]
            ),
        )


@dataclass(frozen=True)
class TraceDecision:
    """The chosen action, confidence in [0, 100] and a qualitative risk label."""
    action_chosen: str
    confidence: Union[int, float]
    risk_assessment: str
    expected_outcome: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actionChosen": self.action_chosen,
            "confidence": self.confidence,
            "riskAssessment": self.risk_assessment,
            "expectedOutcome": self.expected_outcome,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TraceDecision':
        _require(data, ["actionChosen", "confidence", "riskAssessment", "expectedOutcome"], "decision")
        return cls(
            action_chosen=data["actionChosen"],
            confidence=data["confidence"],
            risk_assessment=data["riskAssessment"],
            expected_outcome=data["expectedOutcome"],
        )


@dataclass(frozen=True)
class TraceMetadata:
    """
    Optional trace metadata.

    ``custom`` may be given as a mapping or as (key, value) pairs; it is
    stored as a tuple of pairs sorted by key. ``None`` means absent, while
    an empty mapping is kept as an explicit empty ``custom`` object.
    """
    model: Optional[str] = None
    session_id: Optional[str] = None
    execution_time_ms: Optional[Union[int, float]] = None
    custom: Optional[Tuple[Tuple[str, Scalar], ...]] = None

    def __post_init__(self):
        if self.custom is not None:
            items = self.custom.items() if isinstance(self.custom, Mapping) else self.custom
            object.__setattr__(self, "custom", tuple(sorted(((str(k), v) for k, v in items), key=lambda kv: kv[0])))

    def custom_fields(self) -> Dict[str, Scalar]:
        """Custom fields as a fresh dict."""
        return dict(self.custom or ())

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.model is not None:
            d["model"] = self.model
        if self.session_id is not None:
            d["sessionId"] = self.session_id
        if self.execution_time_ms is not None:
            d["executionTimeMs"] = self.execution_time_ms
        if self.custom is not None:
            d["custom"] = self.custom_fields()
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TraceMetadata':
        _require(data, [], "metadata")
        return cls(
            model=data.get("model"),
            session_id=data.get("sessionId"),
            execution_time_ms=data.get("executionTimeMs"),
            custom=data.get("custom"),
        )


@dataclass(frozen=True)
class ReasoningTrace:
    """
    The canonical evidence record.

    Per the SOLPRISM schema, contains:
    - Schema version and producing agent
    - Creation time (milliseconds since epoch)
    - The action, the inputs consulted, the analysis and the decision
    - Optional metadata

    A trace is never mutated after it is committed; build a new one with
    ``dataclasses.replace`` instead.
    """
    version: str
    agent: str
    timestamp: int
    action: TraceAction
    inputs: TraceInputs
    analysis: TraceAnalysis
    decision: TraceDecision
    metadata: Optional[TraceMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire form used for hashing."""
        d = {
            "version": self.version,
            "agent": self.agent,
            "timestamp": self.timestamp,
            "action": self.action.to_dict(),
            "inputs": self.inputs.to_dict(),
            "analysis": self.analysis.to_dict(),
            "decision": self.decision.to_dict(),
        }
        if self.metadata is not None:
            d["metadata"] = self.metadata.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ReasoningTrace':
        """Create a trace from its wire form."""
        required = ["version", "agent", "timestamp", "action", "inputs", "analysis", "decision"]
        _require(data, required, "trace")

        metadata = data.get("metadata")
        return cls(
            version=data["version"],
            agent=data["agent"],
            timestamp=data["timestamp"],
            action=TraceAction.from_dict(data["action"]),
            inputs=TraceInputs.from_dict(data["inputs"]),
            analysis=TraceAnalysis.from_dict(data["analysis"]),
            decision=TraceDecision.from_dict(data["decision"]),
            metadata=TraceMetadata.from_dict(metadata) if metadata is not None else None,
        )


@dataclass(frozen=True)
class CommitmentSignature:
    """Ed25519 signature binding an agent key to a commitment."""
    key_id: str
    public_key: str
    sig: str
    algorithm: str = "Ed25519"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key_id": self.key_id,
            "algorithm": self.algorithm,
            "public_key": self.public_key,
            "sig": self.sig,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'CommitmentSignature':
        _require(data, ["key_id", "public_key", "sig"], "signature")
        return cls(
            key_id=data["key_id"],
            public_key=data["public_key"],
            sig=data["sig"],
            algorithm=data.get("algorithm", "Ed25519"),
        )


@dataclass(frozen=True)
class CommitmentResult:
    """
    Binds a digest to the exact trace that produced it and the instant of
    commitment. ``hash`` is the only value meant for external anchoring.
    """
    hash: str
    trace: ReasoningTrace
    timestamp: int
    signature: Optional[CommitmentSignature] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "hash": self.hash,
            "trace": self.trace.to_dict(),
            "timestamp": self.timestamp,
        }
        if self.signature is not None:
            d["signature"] = self.signature.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'CommitmentResult':
        _require(data, ["hash", "trace", "timestamp"], "commitment")
        signature = data.get("signature")
        return cls(
            hash=data["hash"],
            trace=ReasoningTrace.from_dict(data["trace"]),
            timestamp=data["timestamp"],
            signature=CommitmentSignature.from_dict(signature) if signature is not None else None,
        )


def commitments_to_list(commitments: Iterable[CommitmentResult]) -> List[Dict[str, Any]]:
    """Export a commitment history to plain dicts for external persistence."""
    return [c.to_dict() for c in commitments]


def commitments_from_list(data: Iterable[Mapping[str, Any]]) -> List[CommitmentResult]:
    """Reload a commitment history exported with ``commitments_to_list``."""
    return [CommitmentResult.from_dict(d) for d in data]
