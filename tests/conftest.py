from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

for candidate in (
    ROOT / "libs" / "core" / "src",
    ROOT / "libs" / "adapters" / "sps" / "src",
    ROOT / "libs" / "adapters" / "rsa" / "src",
    ROOT / "apps" / "cli" / "src",
):
    candidate_str = str(candidate)
    if candidate_str not in sys.path:
        sys.path.insert(0, candidate_str)

from spsbench import default_config  # noqa: E402
from spsbench_sps import Groth15G1  # noqa: E402

# 2**61 - 1 is prime; small enough to keep the suite fast
TEST_ORDER = 2305843009213693951


@pytest.fixture
def small_config():
    return default_config(2, 4, 3, order=TEST_ORDER)


@pytest.fixture
def groth():
    return Groth15G1()
