import itertools

import pytest

from solprism import CommitmentSigner, SolprismShield

from tests.test_builders import NOW_MS

SEED = bytes(range(32))


def fixed_clock(start=NOW_MS):
    """Clock returning start, start+1, ... milliseconds."""
    counter = itertools.count(start)
    return lambda: next(counter)


@pytest.fixture
def signer():
    return CommitmentSigner.from_seed("kid:agentshield-test-001", SEED)


@pytest.fixture
def other_signer():
    return CommitmentSigner.from_seed("kid:agentshield-test-002", bytes(reversed(range(32))))


@pytest.fixture
def shield():
    return SolprismShield(agent_name="AgentShield", clock=fixed_clock())


@pytest.fixture
def signed_shield(signer):
    return SolprismShield(agent_name="AgentShield", signer=signer, clock=fixed_clock())
