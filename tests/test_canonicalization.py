"""
SOLPRISM Canonicalization and Hashing Tests

Ensures:
- Key ordering is normalized at every nesting level
- Array order is preserved
- Hashes are deterministic 64-character lowercase hex
- Encoding errors propagate to the caller
"""

import unittest

from solprism import (
    canonicalize,
    canonicalize_str,
    sha256_hex,
    hash_trace,
    AlternativeAction,
    TraceMetadata,
)


class TestCanonicalization(unittest.TestCase):
    """Canonical JSON encoding."""

    def test_key_ordering(self):
        """Same data, different insertion order, same encoding."""
        first = {
            "version": "1.0.0",
            "agent": "AgentShield",
            "decision": {"confidence": 82, "actionChosen": "buy 1.5"},
        }
        second = {
            "decision": {"actionChosen": "buy 1.5", "confidence": 82},
            "agent": "AgentShield",
            "version": "1.0.0",
        }

        self.assertEqual(canonicalize_str(first), canonicalize_str(second))
        self.assertTrue(canonicalize_str(first).startswith('{"agent":'))

    def test_nested_key_ordering(self):
        """Nested objects, including objects inside arrays, are sorted."""
        data = {
            "z": {"b": 1, "a": 2},
            "a": [{"y": 3, "x": 4}],
        }

        self.assertEqual(canonicalize_str(data), '{"a":[{"x":4,"y":3}],"z":{"a":2,"b":1}}')

    def test_deep_nesting_order_independent(self):
        first = {"metadata": {"custom": {"b": True, "a": "x"}, "model": "m"}}
        second = {"metadata": {"model": "m", "custom": {"a": "x", "b": True}}}

        self.assertEqual(canonicalize(first), canonicalize(second))

    def test_array_order_preserved(self):
        """Arrays are semantically ordered and never sorted."""
        self.assertEqual(canonicalize_str({"o": ["b", "a", "c"]}), '{"o":["b","a","c"]}')
        self.assertNotEqual(
            canonicalize({"o": ["a", "b"]}),
            canonicalize({"o": ["b", "a"]}),
        )

    def test_tuples_encode_as_arrays(self):
        self.assertEqual(canonicalize({"o": ("a", "b")}), canonicalize({"o": ["a", "b"]}))

    def test_no_whitespace(self):
        canonical = canonicalize_str({"key": "value", "nested": {"inner": 1}})

        self.assertNotIn(" ", canonical)
        self.assertNotIn("\n", canonical)

    def test_unicode_not_escaped(self):
        """Observation emoji are encoded as UTF-8, not \\u escapes."""
        canonical = canonicalize({"o": "✅ PASS"})

        self.assertEqual(canonical, '{"o":"✅ PASS"}'.encode('utf-8'))

    def test_literals(self):
        self.assertEqual(canonicalize_str({"t": True, "f": False, "n": None}), '{"f":false,"n":null,"t":true}')

    def test_numbers_lossless(self):
        self.assertEqual(canonicalize_str({"a": 1.5, "b": 82, "c": 0.1}), '{"a":1.5,"b":82,"c":0.1}')

    def test_integral_float_encodes_as_int(self):
        """82.0 and 82 are the same number and encode the same way."""
        self.assertEqual(canonicalize({"c": 82}), canonicalize({"c": 82.0}))
        self.assertEqual(canonicalize_str({"c": 82.0, "z": -0.0}), '{"c":82,"z":0}')
        self.assertEqual(canonicalize_str([1.0, 1.25]), '[1,1.25]')

    def test_huge_float_keeps_exponent(self):
        self.assertEqual(canonicalize_str({"n": 1e21}), '{"n":1e+21}')

    def test_to_dict_objects(self):
        """Trace dataclasses are encoded through their wire form."""
        alt = AlternativeAction(action="Reject trade", reason_rejected="clean")

        self.assertEqual(canonicalize_str(alt), '{"action":"Reject trade","reasonRejected":"clean"}')

    def test_nan_rejected(self):
        with self.assertRaises(ValueError):
            canonicalize({"confidence": float("nan")})

    def test_infinity_rejected(self):
        with self.assertRaises(ValueError):
            canonicalize({"confidence": float("inf")})

    def test_unsupported_type_rejected(self):
        with self.assertRaises(ValueError):
            canonicalize({"when": object()})

    def test_non_string_keys_rejected(self):
        with self.assertRaises(ValueError):
            canonicalize({1: "one"})

    def test_circular_structure_propagates(self):
        data = {}
        data["self"] = data

        with self.assertRaises(RecursionError):
            canonicalize(data)


class TestHashing(unittest.TestCase):
    """SHA-256 hashing."""

    def test_known_vectors(self):
        self.assertEqual(
            sha256_hex(""),
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855",
        )
        self.assertEqual(
            sha256_hex(b"abc"),
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad",
        )

    def test_str_and_bytes_agree(self):
        self.assertEqual(sha256_hex("solprism"), sha256_hex("solprism".encode('utf-8')))

    def test_hash_format(self):
        h = hash_trace({"version": "1.0.0"})

        self.assertEqual(len(h), 64)
        self.assertEqual(h, h.lower())
        int(h, 16)

    def test_hash_determinism(self):
        data = {"analysis": {"observations": ["a", "b"]}, "timestamp": 1768392000000}

        self.assertEqual(hash_trace(data), hash_trace(data))

    def test_hash_is_digest_of_canonical_form(self):
        data = {"b": 1, "a": {"d": 2, "c": 3}}

        self.assertEqual(hash_trace(data), sha256_hex(canonicalize(data)))

    def test_hash_sensitivity(self):
        """Any leaf change changes the hash."""
        base = {"decision": {"confidence": 82, "riskAssessment": "low"}, "analysis": {"observations": ["x"]}}
        variants = [
            {"decision": {"confidence": 83, "riskAssessment": "low"}, "analysis": {"observations": ["x"]}},
            {"decision": {"confidence": 82, "riskAssessment": "high"}, "analysis": {"observations": ["x"]}},
            {"decision": {"confidence": 82, "riskAssessment": "low"}, "analysis": {"observations": ["y"]}},
            {"decision": {"confidence": 82, "riskAssessment": "low"}, "analysis": {"observations": ["x", "x"]}},
            {"decision": {"confidence": 82, "riskAssessment": "low"}, "analysis": {"observations": []}},
        ]

        hashes = {hash_trace(base)} | {hash_trace(v) for v in variants}
        self.assertEqual(len(hashes), len(variants) + 1)

    def test_equal_numeric_values_hash_alike(self):
        """Traces that compare equal hash equal, whatever the number type."""
        with_int = {"decision": {"confidence": 82}, "metadata": {"custom": {"stagesPassed": 3}}}
        with_float = {"decision": {"confidence": 82.0}, "metadata": {"custom": {"stagesPassed": 3.0}}}

        self.assertEqual(with_int, with_float)
        self.assertEqual(hash_trace(with_int), hash_trace(with_float))

    def test_metadata_custom_insertion_order(self):
        first = TraceMetadata(custom={"stagesPassed": 3, "approved": True})
        second = TraceMetadata(custom={"approved": True, "stagesPassed": 3})

        self.assertEqual(hash_trace(first), hash_trace(second))


if __name__ == "__main__":
    unittest.main()
