#!/usr/bin/env python3
"""
SOLPRISM Example - Commit, Execute, Reveal, Verify

This example walks one trading session through the full commitment flow:
collaborator verdicts are gathered, the reasoning is committed before the
trade, the history is exported, and an independent auditor verifies it.

Run with: python examples/trade_commitment_example.py
"""

import json
import random
from typing import Any, Dict, List

from solprism import (
    CommitmentSigner,
    FirewallParams,
    PredictionStage,
    ScamCheckResult,
    SolprismShield,
    TradeDecision,
    TraceVerifier,
    commitments_from_list,
    commitments_to_list,
)

TOKEN = "So11111111111111111111111111111111111111112"


def simulate_prediction_gate(seed: int) -> List[PredictionStage]:
    """
    Simulate the multi-stage prediction gate.

    In production, each stage is a separate confirmation window evaluated
    by the prediction service.
    """
    rng = random.Random(seed)
    stages = []
    for name in ("10min-confirm", "5min-validate", "10min-final"):
        confidence = rng.randint(55, 95)
        passed = confidence >= 70
        reason = "Signal confirmed" if passed else "Signal too weak"
        stages.append(PredictionStage(name, passed, confidence, reason))
    return stages


def simulate_scam_check(token_mint: str) -> ScamCheckResult:
    """
    Simulate the scam & liquidity defense.

    In production, this queries on-chain liquidity, holder distribution
    and mint/freeze authority.
    """
    return ScamCheckResult(token_mint, False, ["liquidity", "holders", "mint authority"], "safe")


def simulate_firewall(amount: float, daily_limit: float) -> FirewallParams:
    """Simulate the transaction firewall's verdict for a swap."""
    within_limit = amount <= daily_limit
    return FirewallParams(
        transaction_type="swap",
        simulated=True,
        simulation_passed=True,
        spend_limit_ok=within_limit,
        slippage_ok=True,
        program_allowed=True,
        approved=within_limit,
        reason="All checks passed" if within_limit else "Daily spend limit exceeded",
    )


def run_session(shield: SolprismShield) -> None:
    for seed, amount in ((7, 1.5), (11, 2.0), (23, 40.0)):
        stages = simulate_prediction_gate(seed)
        decision = TradeDecision(
            token_mint=TOKEN,
            action="buy",
            amount=amount,
            prediction_stages=stages,
            scam_check=simulate_scam_check(TOKEN),
            confidence=min(s.confidence for s in stages),
        )

        # Commit BEFORE acting
        commitment = shield.commit_trade_decision(decision)
        print(f"[{commitment.trace.action.type:>9}] {commitment.hash}")

        if decision.approved:
            verdict = shield.commit_firewall_decision(simulate_firewall(amount, daily_limit=10.0))
            print(f"[{verdict.trace.action.type:>9}] {verdict.hash}")


def audit(exported: List[Dict[str, Any]], trusted_keys: Dict[str, str]) -> bool:
    """An independent auditor verifies a published history."""
    verifier = TraceVerifier(trusted_keys=trusted_keys, require_signature=True)
    results = verifier.audit(commitments_from_list(exported))
    for i, result in enumerate(results):
        print(f"  [{i}] {result.outcome.value}" + (f" ({result.reason})" if result.reason else ""))
    return all(r.is_valid() for r in results)


def main():
    signer = CommitmentSigner.generate("kid:agentshield-example-001")
    shield = SolprismShield(agent_name="AgentShield", signer=signer)

    print("=" * 60)
    print("Trading session")
    print("=" * 60)
    run_session(shield)

    exported = json.loads(json.dumps(commitments_to_list(shield.get_commitments()), ensure_ascii=False))
    trusted = {signer.key_id: signer.public_key}

    print("\n" + "=" * 60)
    print("Audit of published history")
    print("=" * 60)
    print(f"All verified: {audit(exported, trusted)}")

    # Rewrite history after the fact
    exported[0]["trace"]["decision"]["confidence"] = 99
    print("\nAfter rewriting the first trace:")
    print(f"All verified: {audit(exported, trusted)}")


if __name__ == "__main__":
    main()
