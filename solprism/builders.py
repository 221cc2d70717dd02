"""
SOLPRISM Reasoning Trace Builders

Pure functions that assemble a ReasoningTrace from decision evidence
supplied by external collaborators.

The builders never validate their input and never raise on malformed
verdicts. The only impure read is the wall clock (``timestamp`` and each
data source's ``queriedAt``); pass ``now`` to hold it fixed. A naive
``now`` is read as UTC.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import DEFAULT_AGENT_NAME
from .decisions import FirewallParams, TradeDecision
from .trace import (
    SCHEMA_VERSION,
    AlternativeAction,
    DataSource,
    ReasoningTrace,
    TraceAction,
    TraceAnalysis,
    TraceDecision,
    TraceInputs,
    TraceMetadata,
    as_utc,
    iso_utc,
    to_epoch_ms,
)

TRADE_CONTEXT = "AgentShield multi-stage safety gate evaluation"
FIREWALL_CONTEXT = "AgentShield transaction firewall evaluation"

# Risk threshold for approved trades
LOW_RISK_CONFIDENCE = 80

# Firewall decisions are rule-based; confidence is a policy constant
FIREWALL_ALLOW_CONFIDENCE = 90
FIREWALL_DENY_CONFIDENCE = 95

TOKEN_DISPLAY_LENGTH = 8

PASS = "✅ PASS"
FAIL = "❌ FAIL"
SKIPPED = "⏭️ SKIPPED"


def _num(value: Any) -> str:
    """Render a number for display; integral floats drop the trailing .0"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _short_token(token_mint: str) -> str:
    return f"{token_mint[:TOKEN_DISPLAY_LENGTH]}..."


def _metadata(
    custom: Optional[Dict[str, Any]],
    model: Optional[str],
    session_id: Optional[str]
) -> Optional[TraceMetadata]:
    if custom is None and model is None and session_id is None:
        return None
    return TraceMetadata(model=model, session_id=session_id, custom=custom)


def create_trade_reasoning_trace(
    decision: TradeDecision,
    agent: str = DEFAULT_AGENT_NAME,
    now: Optional[datetime] = None,
    model: Optional[str] = None,
    session_id: Optional[str] = None
) -> ReasoningTrace:
    """
    Create a reasoning trace for a multi-stage prediction gate decision.

    Documents all prediction stages, the scam check and the cyclic signal
    that led to a trade allow/deny decision.

    Args:
        decision: Aggregated trade evidence from the collaborators
        agent: Name of the producing agent
        now: Creation instant (default: current UTC time); a naive
            datetime is read as UTC
        model: Optional model identifier recorded in metadata
        session_id: Optional session identifier recorded in metadata

    Returns:
        ReasoningTrace with ``action.type`` "trade" or "rejection"
    """
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    queried_at = iso_utc(now)

    stages = decision.prediction_stages
    failed = decision.failed_stages
    passed_count = decision.passed_count
    scam_safe = decision.scam_safe
    approved = decision.approved
    token = _short_token(decision.token_mint)
    confidence = _num(decision.confidence)

    observations: List[str] = [
        f"Token: {token}",
        f"Action: {decision.action.upper()}",
        f"Amount: {_num(decision.amount)}",
    ]
    observations.extend(
        f"{s.name}: {PASS if s.passed else FAIL} ({_num(s.confidence)}% confidence) - {s.reason}"
        for s in stages
    )

    if decision.scam_check is not None:
        observations.append(
            f"Scam check: {decision.scam_check.risk_level.upper()} - "
            f"{', '.join(decision.scam_check.checks)}"
        )

    if decision.cyclic_signal is not None:
        observations.append(
            f"Cyclic signal: {_num(decision.cyclic_signal.alignment)}% alignment "
            f"in {decision.cyclic_signal.window} window"
        )

    failed_names = ", ".join(s.name for s in failed)

    if approved:
        alternatives = [
            AlternativeAction(
                action="Reject trade",
                reason_rejected="All prediction stages passed and scam check is clean",
            ),
            AlternativeAction(
                action="Wait for more confirmations",
                reason_rejected=f"Confidence at {confidence}%, all {len(stages)} stages confirmed",
            ),
        ]
    elif failed:
        alternatives = [
            AlternativeAction(
                action=f"Execute {decision.action} anyway",
                reason_rejected=f"{len(failed)} prediction stage(s) failed: {failed_names}",
            )
        ]
    else:
        alternatives = [
            AlternativeAction(
                action=f"Execute {decision.action} anyway",
                reason_rejected="Scam check flagged this token",
            )
        ]

    data_sources = [
        DataSource(
            name="Multi-Stage Prediction Gate",
            type="internal",
            queried_at=queried_at,
            summary=f"{passed_count}/{len(stages)} stages passed",
        )
    ]
    if decision.scam_check is not None:
        data_sources.append(DataSource(
            name="Scam & Liquidity Defense",
            type="internal",
            queried_at=queried_at,
            summary=f"Risk level: {decision.scam_check.risk_level}",
        ))
    if decision.cyclic_signal is not None:
        data_sources.append(DataSource(
            name="Cyclic Signal Layer",
            type="internal",
            queried_at=queried_at,
            summary=(
                f"{_num(decision.cyclic_signal.alignment)}% alignment "
                f"in {decision.cyclic_signal.window}"
            ),
        ))

    if approved:
        logic = (
            f"All {len(stages)} prediction stages passed. Scam check clean. "
            f"Confidence: {confidence}%. Trade approved."
        )
    else:
        logic = "Trade blocked by safety gate. "
        if failed:
            logic += f"Failed stages: {failed_names}. "
        if not scam_safe:
            logic += f"Scam check: {decision.scam_check.risk_level}. "
        logic += "No override allowed."

    if approved:
        risk = "low" if decision.confidence >= LOW_RISK_CONFIDENCE else "moderate"
    else:
        risk = "high"

    custom = {
        "stagesPassed": passed_count,
        "totalStages": len(stages),
        "scamRisk": decision.scam_check.risk_level if decision.scam_check is not None else "unchecked",
        "approved": approved,
    }

    return ReasoningTrace(
        version=SCHEMA_VERSION,
        agent=agent,
        timestamp=to_epoch_ms(now),
        action=TraceAction(
            type="trade" if approved else "rejection",
            description=(
                f"APPROVED: {decision.action} {_num(decision.amount)} of {token}"
                if approved
                else f"REJECTED: {decision.action} blocked by safety gate"
            ),
        ),
        inputs=TraceInputs(data_sources=data_sources, context=TRADE_CONTEXT),
        analysis=TraceAnalysis(
            observations=observations,
            logic=logic,
            alternatives_considered=alternatives,
        ),
        decision=TraceDecision(
            action_chosen=(
                f"{decision.action} {_num(decision.amount)}" if approved else "REJECT - trade blocked"
            ),
            confidence=decision.confidence,
            risk_assessment=risk,
            expected_outcome=(
                f"Execute {decision.action} with {confidence}% confidence"
                if approved
                else "Trade rejected, funds protected"
            ),
        ),
        metadata=_metadata(custom, model, session_id),
    )


def create_firewall_trace(
    params: FirewallParams,
    agent: str = DEFAULT_AGENT_NAME,
    now: Optional[datetime] = None,
    model: Optional[str] = None,
    session_id: Optional[str] = None
) -> ReasoningTrace:
    """
    Create a reasoning trace for a transaction firewall decision.

    Documents simulation results, spend limits, slippage and program
    allowlisting, and the allow/deny reasoning. The trace carries no
    metadata unless ``model`` or ``session_id`` is given.
    """
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)

    if params.simulated:
        simulation = PASS if params.simulation_passed else FAIL
    else:
        simulation = SKIPPED

    observations = [
        f"Transaction type: {params.transaction_type}",
        f"Simulation: {simulation}",
        f"Spend limit: {'✅ OK' if params.spend_limit_ok else '❌ EXCEEDED'}",
        f"Slippage: {'✅ OK' if params.slippage_ok else '❌ EXCEEDED'}",
        f"Program allowlist: {'✅ ALLOWED' if params.program_allowed else '❌ BLOCKED'}",
    ]

    if params.approved:
        alternative = AlternativeAction(
            action="Block transaction",
            reason_rejected="All firewall checks passed",
        )
    else:
        alternative = AlternativeAction(action="Allow transaction", reason_rejected=params.reason)

    return ReasoningTrace(
        version=SCHEMA_VERSION,
        agent=agent,
        timestamp=to_epoch_ms(now),
        action=TraceAction(
            type="firewall_allow" if params.approved else "firewall_deny",
            description=(
                f"Firewall ALLOW: {params.transaction_type}"
                if params.approved
                else f"Firewall DENY: {params.transaction_type} - {params.reason}"
            ),
        ),
        inputs=TraceInputs(
            data_sources=[
                DataSource(
                    name="Transaction Firewall",
                    type="internal",
                    queried_at=iso_utc(now),
                    summary=params.reason,
                )
            ],
            context=FIREWALL_CONTEXT,
        ),
        analysis=TraceAnalysis(
            observations=observations,
            logic=params.reason,
            alternatives_considered=[alternative],
        ),
        decision=TraceDecision(
            action_chosen="ALLOW" if params.approved else "DENY",
            confidence=FIREWALL_ALLOW_CONFIDENCE if params.approved else FIREWALL_DENY_CONFIDENCE,
            risk_assessment="low" if params.approved else "high",
            expected_outcome=(
                "Transaction executed safely" if params.approved else "Transaction blocked, funds protected"
            ),
        ),
        metadata=_metadata(None, model, session_id),
    )
