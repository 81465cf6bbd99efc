from __future__ import annotations
from enum import Enum


class BenchmarkMode(str, Enum):
    TIME = "time"
    COUNTING = "counting"


class Stage(str, Enum):
    """Lifecycle stages in the only order they may run."""
    SETUP = "setup"
    KEYGEN = "keyGen"
    SIGN = "sign"
    VERIFY = "verify"


STAGE_ORDER = (Stage.SETUP, Stage.KEYGEN, Stage.SIGN, Stage.VERIFY)
