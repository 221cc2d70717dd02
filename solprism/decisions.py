"""
SOLPRISM Decision Inputs

Already-computed verdicts supplied by external collaborators: the
multi-stage prediction gate, the scam & liquidity defense, the cyclic
signal layer and the transaction firewall.

These types carry no validation. Malformed input (an empty stage list, a
confidence outside [0, 100]) is accepted as-is; checking it is the
collaborator's responsibility.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .trace import _require

Number = Union[int, float]


class TradeAction(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class RiskLevel(str, Enum):
    """Scam check risk levels."""
    SAFE = "safe"
    SUSPICIOUS = "suspicious"
    DANGEROUS = "dangerous"


def _plain(value: Any) -> Any:
    """Unwrap enum members to their string value."""
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class PredictionStage:
    """One confirmation window's verdict from the prediction gate."""
    name: str
    passed: bool
    confidence: Number
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "passed": self.passed,
            "confidence": self.confidence,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PredictionStage':
        _require(data, ["name", "passed", "confidence", "reason"], "predictionStage")
        return cls(
            name=data["name"],
            passed=data["passed"],
            confidence=data["confidence"],
            reason=data["reason"],
        )


@dataclass(frozen=True)
class ScamCheckResult:
    token_mint: str
    is_scam: bool
    checks: Tuple[str, ...]
    risk_level: str

    def __post_init__(self):
        object.__setattr__(self, "checks", tuple(self.checks))
        object.__setattr__(self, "risk_level", _plain(self.risk_level))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokenMint": self.token_mint,
            "isScam": self.is_scam,
            "checks": list(self.checks),
            "riskLevel": self.risk_level,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ScamCheckResult':
        _require(data, ["tokenMint", "isScam", "checks", "riskLevel"], "scamCheck")
        return cls(
            token_mint=data["tokenMint"],
            is_scam=data["isScam"],
            checks=tuple(data["checks"]),
            risk_level=data["riskLevel"],
        )


@dataclass(frozen=True)
class CyclicSignal:
    """Cyclic-signal summary: alignment percentage within a time window."""
    alignment: Number
    window: str

    def to_dict(self) -> Dict[str, Any]:
        return {"alignment": self.alignment, "window": self.window}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'CyclicSignal':
        _require(data, ["alignment", "window"], "cyclicSignal")
        return cls(alignment=data["alignment"], window=data["window"])


@dataclass(frozen=True)
class TradeDecision:
    """
    Aggregated trade-decision evidence.

    ``prediction_stages`` is ordered; the gate is expected (not required)
    to supply at least one stage.
    """
    token_mint: str
    action: str
    amount: Number
    prediction_stages: Tuple[PredictionStage, ...]
    confidence: Number
    scam_check: Optional[ScamCheckResult] = None
    cyclic_signal: Optional[CyclicSignal] = None

    def __post_init__(self):
        object.__setattr__(self, "action", _plain(self.action))
        object.__setattr__(self, "prediction_stages", tuple(self.prediction_stages))

    @property
    def failed_stages(self) -> Tuple[PredictionStage, ...]:
        return tuple(s for s in self.prediction_stages if not s.passed)

    @property
    def passed_count(self) -> int:
        return sum(1 for s in self.prediction_stages if s.passed)

    @property
    def scam_safe(self) -> bool:
        return self.scam_check is None or not self.scam_check.is_scam

    @property
    def approved(self) -> bool:
        """All stages passed and the scam check (if any) is clean."""
        return all(s.passed for s in self.prediction_stages) and self.scam_safe

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "tokenMint": self.token_mint,
            "action": self.action,
            "amount": self.amount,
            "predictionStages": [s.to_dict() for s in self.prediction_stages],
            "confidence": self.confidence,
        }
        if self.scam_check is not None:
            d["scamCheck"] = self.scam_check.to_dict()
        if self.cyclic_signal is not None:
            d["cyclicSignal"] = self.cyclic_signal.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TradeDecision':
        _require(data, ["tokenMint", "action", "amount", "predictionStages", "confidence"], "tradeDecision")
        scam_check = data.get("scamCheck")
        cyclic_signal = data.get("cyclicSignal")
        return cls(
            token_mint=data["tokenMint"],
            action=data["action"],
            amount=data["amount"],
            prediction_stages=tuple(PredictionStage.from_dict(s) for s in data["predictionStages"]),
            confidence=data["confidence"],
            scam_check=ScamCheckResult.from_dict(scam_check) if scam_check is not None else None,
            cyclic_signal=CyclicSignal.from_dict(cyclic_signal) if cyclic_signal is not None else None,
        )


@dataclass(frozen=True)
class FirewallParams:
    """Transaction firewall verdict."""
    transaction_type: str
    simulated: bool
    simulation_passed: bool
    spend_limit_ok: bool
    slippage_ok: bool
    program_allowed: bool
    approved: bool
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactionType": self.transaction_type,
            "simulated": self.simulated,
            "simulationPassed": self.simulation_passed,
            "spendLimitOk": self.spend_limit_ok,
            "slippageOk": self.slippage_ok,
            "programAllowed": self.program_allowed,
            "approved": self.approved,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'FirewallParams':
        required = [
            "transactionType", "simulated", "simulationPassed", "spendLimitOk",
            "slippageOk", "programAllowed", "approved", "reason",
        ]
        _require(data, required, "firewallParams")
        return cls(
            transaction_type=data["transactionType"],
            simulated=data["simulated"],
            simulation_passed=data["simulationPassed"],
            spend_limit_ok=data["spendLimitOk"],
            slippage_ok=data["slippageOk"],
            program_allowed=data["programAllowed"],
            approved=data["approved"],
            reason=data["reason"],
        )
