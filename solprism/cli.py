#!/usr/bin/env python3
"""
SOLPRISM Command Line Interface

Usage:
    solprism hash --file <trace.json>
    solprism verify --file <trace.json> --hash <hex>
    solprism audit --file <commitments.json> [--trusted-key <key.json>]
    solprism keygen --output <key.json>
    solprism demo [--export <commitments.json>]
"""

import argparse
import json
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from .config import LOG_FILE, LOG_JSON, LOG_LEVEL, is_debug
from .logging_config import configure_logging


def load_json(path: str) -> Any:
    """Load JSON from file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_json(data: Any, path: str):
    """Save JSON to file."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _revealed_trace(data: Dict[str, Any]) -> Dict[str, Any]:
    """Accept either a bare trace or an exported commitment."""
    if "trace" in data and "hash" in data:
        return data["trace"]
    return data


def cmd_hash(args) -> int:
    """Compute the commitment hash of a trace file."""
    from .hashing import hash_trace

    data = load_json(args.file)
    print(f"trace_hash: {hash_trace(_revealed_trace(data))}")
    return 0


def cmd_verify(args) -> int:
    """Verify a revealed trace against a committed hash."""
    from .verifier import TraceVerifier

    data = load_json(args.file)
    if not isinstance(data, dict):
        print(f"✗ Expected a trace or commitment object, got {type(data).__name__}", file=sys.stderr)
        return 2

    declared = args.hash or data.get("hash")
    if not declared:
        print("✗ No hash given and the file is not an exported commitment", file=sys.stderr)
        return 2

    result = TraceVerifier().verify(declared, _revealed_trace(data))

    if result.is_valid():
        print(f"✓ {result.outcome.value}")
        return 0
    print(f"✗ {result.outcome.value}: {result.reason}")
    print(json.dumps(result.details, indent=2))
    return 1


def _load_trusted_keys(paths: Optional[List[str]]) -> Optional[Dict[str, str]]:
    if not paths:
        return None
    keys = {}
    for path in paths:
        data = load_json(path)
        keys[data["key_id"]] = data["public_key"]
    return keys


def cmd_audit(args) -> int:
    """Verify every commitment in an exported history."""
    from .trace import TraceFormatError, commitments_from_list
    from .verifier import TraceVerifier

    data = load_json(args.file)
    if isinstance(data, dict):
        data = data.get("commitments", [])

    try:
        commitments = commitments_from_list(data)
    except TraceFormatError as e:
        print(f"✗ Malformed commitment history: {e}", file=sys.stderr)
        return 2

    verifier = TraceVerifier(
        trusted_keys=_load_trusted_keys(args.trusted_key),
        require_signature=args.require_signature,
    )
    results = verifier.audit(commitments)

    failures = 0
    for i, (commitment, result) in enumerate(zip(commitments, results)):
        mark = "✓" if result.is_valid() else "✗"
        line = f"{mark} [{i}] {commitment.hash[:16]}... {commitment.trace.action.type}: {result.outcome.value}"
        if result.reason:
            line += f" ({result.reason})"
        print(line)
        if not result.is_valid():
            failures += 1

    print(f"\n{len(results) - failures}/{len(results)} commitments verified", file=sys.stderr)
    return 0 if failures == 0 else 1


def cmd_keygen(args) -> int:
    """Generate an Ed25519 commitment signing key."""
    from .signing import CommitmentSigner

    key_id = args.key_id or f"kid:solprism-{datetime.now().strftime('%Y%m%d')}-001"
    signer = CommitmentSigner.generate(key_id)
    signer.save(args.output)

    print(f"Key saved to: {args.output}")
    print(f"Key id: {key_id}", file=sys.stderr)
    print(f"Public key: {signer.public_key}", file=sys.stderr)
    return 0


def cmd_demo(args) -> int:
    """Run a demonstration of commit-then-verify."""
    from dataclasses import replace

    from .decisions import FirewallParams, PredictionStage, ScamCheckResult, TradeDecision
    from .shield import SolprismShield
    from .trace import commitments_to_list

    print("=" * 60)
    print("SOLPRISM Reasoning Commitment Demonstration")
    print("=" * 60)

    shield = SolprismShield.from_config()
    token = "So11111111111111111111111111111111111111112"
    scam_check = ScamCheckResult(token, False, ["liquidity", "holders"], "safe")

    # Scenario 1: all stages pass
    print("\n" + "-" * 60)
    print("Scenario 1: Trade with all prediction stages passing")
    print("-" * 60)

    approved = shield.commit_trade_decision(TradeDecision(
        token_mint=token,
        action="buy",
        amount=1.5,
        prediction_stages=[
            PredictionStage("10min-confirm", True, 85, "Uptrend confirmed"),
            PredictionStage("5min-validate", True, 78, "Secondary signal holds"),
            PredictionStage("10min-final", True, 82, "Third window passed"),
        ],
        scam_check=scam_check,
        confidence=82,
    ))
    print(f"Action: {approved.trace.action.type}")
    print(f"Risk: {approved.trace.decision.risk_assessment}")
    print(f"Hash: {approved.hash}")

    # Scenario 2: second stage fails
    print("\n" + "-" * 60)
    print("Scenario 2: Trade with a failed confirmation window")
    print("-" * 60)

    rejected = shield.commit_trade_decision(TradeDecision(
        token_mint=token,
        action="buy",
        amount=1.5,
        prediction_stages=[
            PredictionStage("10min-confirm", True, 85, "Uptrend confirmed"),
            PredictionStage("5min-validate", False, 41, "Momentum reversed"),
            PredictionStage("10min-final", True, 82, "Third window passed"),
        ],
        scam_check=scam_check,
        confidence=69,
    ))
    print(f"Action: {rejected.trace.action.type}")
    for alt in rejected.trace.analysis.alternatives_considered:
        print(f"  Rejected alternative: {alt.action} ({alt.reason_rejected})")
    print(f"Hash: {rejected.hash}")

    # Scenario 3: firewall deny
    print("\n" + "-" * 60)
    print("Scenario 3: Transaction firewall denies a swap")
    print("-" * 60)

    denied = shield.commit_firewall_decision(FirewallParams(
        transaction_type="swap",
        simulated=True,
        simulation_passed=True,
        spend_limit_ok=False,
        slippage_ok=True,
        program_allowed=True,
        approved=False,
        reason="Daily spend limit exceeded",
    ))
    print(f"Decision: {denied.trace.decision.action_chosen}")
    print(f"Hash: {denied.hash}")

    # Reveal and verify
    print("\n" + "-" * 60)
    print("Verification")
    print("-" * 60)

    print(f"Original trace matches: {shield.verify(approved.hash, approved.trace)}")
    tampered = replace(
        approved.trace,
        decision=replace(approved.trace.decision, confidence=99),
    )
    print(f"Tampered trace matches: {shield.verify(approved.hash, tampered)}")

    if args.export:
        save_json(commitments_to_list(shield.get_commitments()), args.export)
        print(f"\nCommitments exported to: {args.export}")

    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solprism",
        description="SOLPRISM reasoning commitment CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  solprism demo --export commitments.json
  solprism hash -f trace.json
  solprism verify -f trace.json --hash 3f2a...
  solprism audit -f commitments.json -k key.json --require-signature
  solprism keygen -o key.json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # hash
    hash_parser = subparsers.add_parser("hash", help="Compute a trace commitment hash")
    hash_parser.add_argument("-f", "--file", required=True, help="Trace or commitment JSON file")

    # verify
    verify_parser = subparsers.add_parser("verify", help="Verify a revealed trace")
    verify_parser.add_argument("-f", "--file", required=True, help="Trace or commitment JSON file")
    verify_parser.add_argument("--hash", help="Committed hash (default: the file's own hash)")

    # audit
    audit_parser = subparsers.add_parser("audit", help="Verify an exported commitment history")
    audit_parser.add_argument("-f", "--file", required=True, help="Commitments JSON file")
    audit_parser.add_argument(
        "-k", "--trusted-key", action="append",
        help="Key file whose public key is trusted (repeatable)"
    )
    audit_parser.add_argument(
        "--require-signature", action="store_true",
        help="Treat unsigned commitments as invalid"
    )

    # keygen
    keygen_parser = subparsers.add_parser("keygen", help="Generate a commitment signing key")
    keygen_parser.add_argument("-o", "--output", required=True, help="Output key file")
    keygen_parser.add_argument("-k", "--key-id", help="Key identifier")

    # demo
    demo_parser = subparsers.add_parser("demo", help="Run demonstration")
    demo_parser.add_argument("--export", help="Write the demo commitments to this file")

    return parser


COMMANDS = {
    "hash": cmd_hash,
    "verify": cmd_verify,
    "audit": cmd_audit,
    "keygen": cmd_keygen,
    "demo": cmd_demo,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level="DEBUG" if is_debug() else LOG_LEVEL,
        json_format=LOG_JSON,
        log_file=LOG_FILE or None,
    )

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 0
    return command(args)


if __name__ == "__main__":
    sys.exit(main())
