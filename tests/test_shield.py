"""
SOLPRISM Commitment Manager Tests

Covers commit/verify, history ordering and isolation, concurrent commits,
failure atomicity, logging and signer integration.
"""

import copy
import json
import os
import tempfile
import threading
import unittest
from unittest import mock

from solprism import (
    CommitmentSigner,
    InMemoryCommitmentStore,
    SolprismShield,
    create_trade_reasoning_trace,
    hash_trace,
    verify_commitment_signature,
)
from solprism.trace import now_ms

from tests.conftest import SEED, fixed_clock
from tests.test_builders import NOW, NOW_MS, make_firewall_params, make_trade_decision


class TestCommit(unittest.TestCase):

    def setUp(self):
        self.shield = SolprismShield(agent_name="AgentShield", clock=fixed_clock())
        self.trace = create_trade_reasoning_trace(make_trade_decision(), now=NOW)

    def test_commit_returns_hash_of_trace(self):
        result = self.shield.commit(self.trace)

        self.assertEqual(result.hash, hash_trace(self.trace))
        self.assertIs(result.trace, self.trace)
        self.assertEqual(result.timestamp, NOW_MS)
        self.assertIsNone(result.signature)

    def test_commit_then_verify(self):
        result = self.shield.commit(self.trace)

        self.assertTrue(self.shield.verify(result.hash, result.trace))

    def test_same_trace_twice(self):
        """Identical traces give identical hashes and two history entries."""
        first = self.shield.commit(self.trace)
        second = self.shield.commit(self.trace)

        self.assertEqual(first.hash, second.hash)
        self.assertEqual(len(self.shield.get_commitments()), 2)

    def test_commit_timestamp_is_independent_of_trace_timestamp(self):
        result = self.shield.commit(self.trace)
        later = self.shield.commit(self.trace)

        self.assertEqual(result.trace.timestamp, later.trace.timestamp)
        self.assertGreater(later.timestamp, result.timestamp)

    def test_default_clock_is_wall_clock(self):
        shield = SolprismShield()
        before = now_ms()
        result = shield.commit(self.trace)

        self.assertGreaterEqual(result.timestamp, before)
        self.assertLessEqual(result.timestamp, now_ms())

    def test_default_agent_name(self):
        self.assertEqual(SolprismShield().agent_name, "AgentShield")


class TestVerify(unittest.TestCase):

    def setUp(self):
        self.shield = SolprismShield(clock=fixed_clock())
        self.result = self.shield.commit(create_trade_reasoning_trace(make_trade_decision(), now=NOW))

    def test_mutated_copy_fails(self):
        revealed = copy.deepcopy(self.result.trace.to_dict())
        revealed["decision"]["confidence"] = 99

        self.assertFalse(self.shield.verify(self.result.hash, revealed))

    def test_nested_mutation_fails(self):
        revealed = self.result.trace.to_dict()
        revealed["analysis"]["observations"][3] = "10min-confirm: ✅ PASS (99% confidence) - Uptrend confirmed"

        self.assertFalse(self.shield.verify(self.result.hash, revealed))

    def test_revealed_dict_verifies(self):
        revealed = json.loads(json.dumps(self.result.trace.to_dict(), ensure_ascii=False))

        self.assertTrue(self.shield.verify(self.result.hash, revealed))

    def test_reveal_with_integral_number_verifies(self):
        """A float confidence re-serialized as an integer still verifies."""
        result = self.shield.commit_trade_decision(make_trade_decision(confidence=90.0))
        revealed = result.trace.to_dict()
        revealed["decision"]["confidence"] = 90

        self.assertTrue(self.shield.verify(result.hash, revealed))

    def test_wrong_hash_fails(self):
        self.assertFalse(self.shield.verify("0" * 64, self.result.trace))

    def test_uppercase_hash_fails(self):
        """Hash comparison is exact."""
        self.assertFalse(self.shield.verify(self.result.hash.upper(), self.result.trace))

    def test_non_string_hash_fails(self):
        self.assertFalse(self.shield.verify(None, self.result.trace))

    def test_verify_does_not_consult_history(self):
        other = SolprismShield()

        self.assertTrue(other.verify(self.result.hash, self.result.trace))
        self.assertEqual(other.get_commitments(), [])

    def test_verify_does_not_record(self):
        self.shield.verify(self.result.hash, self.result.trace)

        self.assertEqual(len(self.shield.get_commitments()), 1)


class TestHistory(unittest.TestCase):

    def test_commit_order(self):
        shield = SolprismShield(clock=fixed_clock())
        results = [
            shield.commit_trade_decision(make_trade_decision()),
            shield.commit_firewall_decision(make_firewall_params()),
            shield.commit_trade_decision(make_trade_decision(confidence=70)),
        ]

        history = shield.get_commitments()
        self.assertEqual(history, results)
        self.assertEqual([c.timestamp for c in history], sorted(c.timestamp for c in history))

    def test_snapshot_isolation(self):
        shield = SolprismShield()
        shield.commit_firewall_decision(make_firewall_params())

        snapshot = shield.get_commitments()
        snapshot.clear()

        self.assertEqual(len(shield.get_commitments()), 1)

    def test_snapshot_does_not_see_later_commits(self):
        shield = SolprismShield()
        shield.commit_firewall_decision(make_firewall_params())
        snapshot = shield.get_commitments()

        shield.commit_firewall_decision(make_firewall_params())

        self.assertEqual(len(snapshot), 1)
        self.assertEqual(len(shield.get_commitments()), 2)

    def test_independent_shields(self):
        first = SolprismShield(agent_name="a")
        second = SolprismShield(agent_name="b")

        first.commit_firewall_decision(make_firewall_params())

        self.assertEqual(len(first.get_commitments()), 1)
        self.assertEqual(second.get_commitments(), [])

    def test_shared_store_injection(self):
        store = InMemoryCommitmentStore()
        shield = SolprismShield(store=store)
        shield.commit_firewall_decision(make_firewall_params())

        self.assertEqual(len(store), 1)

    def test_query(self):
        shield = SolprismShield(clock=fixed_clock())
        shield.commit_trade_decision(make_trade_decision())
        shield.commit_firewall_decision(make_firewall_params(approved=False, reason="Blocked"))
        shield.commit_firewall_decision(make_firewall_params())

        store = shield.store
        self.assertEqual(len(store.query(action_type="firewall_deny")), 1)
        self.assertEqual(len(store.query(since_ms=NOW_MS + 1)), 2)
        self.assertEqual(len(store.query(until_ms=NOW_MS)), 1)
        self.assertEqual(len(store.query(action_type="trade", since_ms=NOW_MS + 1)), 0)


class TestConcurrency(unittest.TestCase):

    def test_concurrent_commits(self):
        """No entry is lost under concurrent commits."""
        shield = SolprismShield()
        threads_count = 8
        per_thread = 50

        def worker(n):
            for i in range(per_thread):
                shield.commit_trade_decision(make_trade_decision(amount=n * 1000 + i))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(threads_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        history = shield.get_commitments()
        self.assertEqual(len(history), threads_count * per_thread)
        self.assertEqual(len({c.hash for c in history}), threads_count * per_thread)

        # Per-thread order is preserved
        amounts = [int(c.trace.decision.action_chosen.split()[1]) for c in history]
        for n in range(threads_count):
            mine = [a for a in amounts if a // 1000 == n]
            self.assertEqual(mine, [n * 1000 + i for i in range(per_thread)])


class TestFailureAtomicity(unittest.TestCase):

    def test_nan_confidence_raises_and_stores_nothing(self):
        shield = SolprismShield()

        with self.assertRaises(ValueError):
            shield.commit_trade_decision(make_trade_decision(confidence=float("nan")))

        self.assertEqual(shield.get_commitments(), [])

    def test_bad_trace_does_not_log(self):
        shield = SolprismShield()
        with mock.patch.object(shield.log, "commitment_recorded") as recorded:
            with self.assertRaises(ValueError):
                shield.commit_trade_decision(make_trade_decision(confidence=float("inf")))
        recorded.assert_not_called()


class TestLogging(unittest.TestCase):

    def test_commit_logged(self):
        shield = SolprismShield(agent_name="desk-7")
        with self.assertLogs("solprism.commitments", level="INFO") as logs:
            result = shield.commit_trade_decision(make_trade_decision())

        self.assertEqual(len(logs.records), 1)
        record = logs.records[0]
        self.assertIn("Reasoning committed: trade", record.getMessage())
        self.assertIn(f"hash={result.hash[:16]}...", record.getMessage())
        self.assertEqual(record.extra_fields["event_type"], "COMMITMENT_RECORDED")
        self.assertEqual(record.extra_fields["agent"], "desk-7")
        self.assertEqual(record.extra_fields["decision"], "buy 1.5")
        self.assertEqual(record.extra_fields["confidence"], 82)
        self.assertFalse(record.extra_fields["signed"])

    def test_mismatch_logged_as_warning(self):
        shield = SolprismShield()
        result = shield.commit_firewall_decision(make_firewall_params())

        with self.assertLogs("solprism.commitments", level="WARNING") as logs:
            shield.verify("f" * 64, result.trace)

        self.assertEqual(logs.records[0].extra_fields["outcome"], "MISMATCH")

    def test_full_hash_never_logged(self):
        shield = SolprismShield()
        with self.assertLogs("solprism.commitments", level="INFO") as logs:
            result = shield.commit_firewall_decision(make_firewall_params())

        self.assertNotIn(result.hash, logs.output[0])


class TestSigning(unittest.TestCase):

    def setUp(self):
        self.signer = CommitmentSigner.from_seed("kid:agentshield-test-001", SEED)
        self.shield = SolprismShield(signer=self.signer, clock=fixed_clock())

    def test_commitments_signed(self):
        result = self.shield.commit_firewall_decision(make_firewall_params())

        self.assertIsNotNone(result.signature)
        self.assertEqual(result.signature.key_id, "kid:agentshield-test-001")
        self.assertEqual(result.signature.public_key, self.signer.public_key)
        self.assertTrue(verify_commitment_signature(result))

    def test_signature_does_not_change_hash(self):
        unsigned = SolprismShield(clock=fixed_clock())
        trace = create_trade_reasoning_trace(make_trade_decision(), now=NOW)

        self.assertEqual(self.shield.commit(trace).hash, unsigned.commit(trace).hash)

    def test_from_config_loads_signer(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "key.json")
            self.signer.save(path)

            with mock.patch("solprism.shield.signing_enabled", return_value=True), \
                    mock.patch("solprism.shield.SIGNING_KEY_PATH", path):
                shield = SolprismShield.from_config()

        self.assertIsNotNone(shield.signer)
        self.assertEqual(shield.signer.public_key, self.signer.public_key)

    def test_from_config_without_key(self):
        with mock.patch("solprism.shield.signing_enabled", return_value=False):
            shield = SolprismShield.from_config(session_id="s-1")

        self.assertIsNone(shield.signer)
        self.assertEqual(shield.session_id, "s-1")

    def test_session_fields_flow_into_traces(self):
        shield = SolprismShield(agent_name="desk-7", model="gpt-x", session_id="s-1")
        result = shield.commit_firewall_decision(make_firewall_params())

        self.assertEqual(result.trace.agent, "desk-7")
        self.assertEqual(result.trace.to_dict()["metadata"], {"model": "gpt-x", "sessionId": "s-1"})


if __name__ == "__main__":
    unittest.main()
