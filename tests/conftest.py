"""
Pytest configuration and shared fixtures for the linearization tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add the project root to the path so absolute imports work
# (tests/ is inside the project root, so parent is the root)
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from circuits.feature_flags import FeatureFlags  # noqa: E402
from expr.ast import variables  # noqa: E402
from expr.environment import Constants, Environment  # noqa: E402
from primitives.field import FF  # noqa: E402

POSEIDON_MDS = [[2, 1, 1], [1, 2, 1], [1, 1, 2]]
DOMAIN_SIZE = 16


@pytest.fixture
def rng():
    return np.random.default_rng(0xC0FFEE)


@pytest.fixture
def constants(rng):
    """Random challenges with the Poseidon MDS matrix."""
    return Constants(
        alpha=FF.Random(seed=rng),
        beta=FF.Random(seed=rng),
        gamma=FF.Random(seed=rng),
        joint_combiner=FF.Random(seed=rng),
        mds=POSEIDON_MDS,
    )


@pytest.fixture
def random_env(rng, constants):
    """Factory: verifier environment with a random value for every cell of exprs."""

    def make(*exprs, features=None):
        cells = {}
        for e in exprs:
            for var in sorted(variables(e)):
                if var not in cells:
                    cells[var] = FF.Random(seed=rng)
        return Environment(
            constants=constants,
            cells=cells,
            domain_size=DOMAIN_SIZE,
            zeta=FF.Random(seed=rng),
            features=features if features is not None else FeatureFlags.all(),
        )

    return make
