from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .config import BenchmarkConfig
from .counting import CountingEngine
from .errors import BenchmarkStateError, InvalidConfiguration, UnsupportedMode
from .interfaces import KeyPair, MeasuredOperation, Message, OperationInstance
from .messages import prepare_messages
from .metrics import BenchmarkResult, BenchmarkSummary
from .modes import STAGE_ORDER, BenchmarkMode, Stage
from .slots import SharingPolicy, SlotArena
from .timing import TimingEngine

"""Benchmark orchestrator.

Owns every piece of state threaded between the four lifecycle stages and
drives each stage through the engine selected by the benchmark mode:

    setup  -> instances[i]   = construct(substrate, payload_size)
    keyGen -> key_pairs[i]   = instances[i].generate_key_pair(payload_size)
    sign   -> signatures[i]  = instances[i].sign(key_pairs[i].signing_key, messages[i])
    verify -> outcomes[i]    = instances[i].verify(messages[i], signatures[i], vk)

Timing runs keep one slot per iteration so no measured call benefits from
state cached by a previous one; counting runs attribute a single call and
therefore share slot 0.
"""

log = logging.getLogger(__name__)

SHARING_POLICIES: Dict[BenchmarkMode, SharingPolicy] = {
    BenchmarkMode.TIME: SharingPolicy.FRESH_PER_ITERATION,
    BenchmarkMode.COUNTING: SharingPolicy.SINGLE_SHARED,
}

_ENGINES: Dict[BenchmarkMode, Callable[[BenchmarkConfig], Any]] = {
    BenchmarkMode.TIME: TimingEngine,
    BenchmarkMode.COUNTING: CountingEngine,
}


def select_engine(mode: BenchmarkMode, config: BenchmarkConfig):
    if not isinstance(mode, BenchmarkMode):
        raise UnsupportedMode(f"unsupported benchmark mode: {mode!r}")
    return _ENGINES[mode](config)


class SPSBenchmark:
    """Runs setup, keyGen, sign and verify for one scheme in one mode."""

    def __init__(
        self,
        config: BenchmarkConfig,
        operation: MeasuredOperation,
        mode: BenchmarkMode,
        messages: Optional[Sequence[Message]] = None,
        *,
        engine: Any = None,
    ) -> None:
        if not isinstance(mode, BenchmarkMode):
            raise UnsupportedMode(f"unsupported benchmark mode: {mode!r}")
        self.config = config
        self.operation = operation
        self.mode = mode
        self.substrate = config.substrate_for(mode)
        self.engine = engine if engine is not None else select_engine(mode, config)

        runs = config.run_iterations
        # long-lived instance: names the scheme and proves the delegate works
        self.blueprint: OperationInstance = operation.construct(self.substrate, config.payload_size)
        self.label = type(self.blueprint).__name__

        if messages is None:
            group = self.substrate.group(operation.message_group)
            messages = prepare_messages(group, runs, config.payload_size)
        elif len(messages) != runs:
            raise InvalidConfiguration(
                f"expected {runs} pre-generated messages, got {len(messages)}"
            )
        self.messages: List[Message] = list(messages)

        policy = SHARING_POLICIES[mode]
        self.instances: SlotArena[OperationInstance] = SlotArena("instances", runs, policy)
        self.key_pairs: SlotArena[KeyPair] = SlotArena("key_pairs", runs, policy)
        self.signatures: SlotArena[Any] = SlotArena("signatures", runs, policy)
        self.verify_outcomes: SlotArena[bool] = SlotArena("verify_outcomes", runs, policy)

        self.results: List[BenchmarkResult] = []
        self._steps = {
            Stage.SETUP: self._run_setup,
            Stage.KEYGEN: self._run_key_gen,
            Stage.SIGN: self._run_sign,
            Stage.VERIFY: self._run_verify,
        }

    @property
    def policy(self) -> SharingPolicy:
        return SHARING_POLICIES[self.mode]

    @property
    def next_stage(self) -> Optional[Stage]:
        done = len(self.results)
        return STAGE_ORDER[done] if done < len(STAGE_ORDER) else None

    @property
    def finished(self) -> bool:
        return self.next_stage is None

    # -- stage steps, parameterised by iteration number --------------------

    def _message(self, iteration: int) -> Message:
        return self.messages[self.key_pairs.index(iteration)]

    def _run_setup(self, iteration: int) -> None:
        self.instances[iteration] = self.operation.construct(self.substrate, self.config.payload_size)

    def _run_key_gen(self, iteration: int) -> None:
        self.key_pairs[iteration] = self.instances[iteration].generate_key_pair(self.config.payload_size)

    def _run_sign(self, iteration: int) -> None:
        self.signatures[iteration] = self.instances[iteration].sign(
            self.key_pairs[iteration].signing_key, self._message(iteration)
        )

    def _run_verify(self, iteration: int) -> None:
        self.verify_outcomes[iteration] = self.instances[iteration].verify(
            self._message(iteration),
            self.signatures[iteration],
            self.key_pairs[iteration].verification_key,
        )

    # ----------------------------------------------------------------------

    def force_round_trip(self, iteration: int = 0) -> None:
        """Replace key pair and signature in a slot by their restored encodings."""
        instance = self.instances[iteration]
        self.key_pairs[iteration] = instance.restore_key_pair(
            instance.serialize_key_pair(self.key_pairs[iteration])
        )
        self.signatures[iteration] = instance.restore_signature(
            instance.serialize_signature(self.signatures[iteration])
        )

    def run_stage(self, stage: Union[Stage, str]) -> BenchmarkResult:
        stage = Stage(stage)
        expected = self.next_stage
        if expected is None:
            raise BenchmarkStateError("benchmark already ran all four stages")
        if stage is not expected:
            raise BenchmarkStateError(
                f"stage {stage.value!r} requested but {expected.value!r} must run first"
            )

        if stage is Stage.VERIFY and self.mode is BenchmarkMode.COUNTING:
            # count verification against deserialized objects, not the ones sign left in memory
            self.force_round_trip()

        measurement = self.engine.run(stage.value, self._steps[stage], label=self.label)

        failures = 0
        if stage is Stage.VERIFY:
            failures = sum(1 for ok in self.verify_outcomes.values() if not ok)
            if failures:
                log.warning(
                    "%s: %d of %d verifications returned false",
                    self.operation.name, failures, len(self.verify_outcomes),
                )

        if self.mode is BenchmarkMode.TIME:
            result = BenchmarkResult(stage.value, self.mode.value, times=measurement, verify_failures=failures)
        else:
            result = BenchmarkResult(stage.value, self.mode.value, counts=measurement, verify_failures=failures)
        self.results.append(result)
        return result

    def run(self) -> List[BenchmarkResult]:
        while not self.finished:
            self.run_stage(self.next_stage)
        return list(self.results)

    def summary(self) -> BenchmarkSummary:
        return BenchmarkSummary(
            scheme=self.operation.name,
            mode=self.mode.value,
            results=list(self.results),
            meta={
                "instance_class": self.label,
                "message_group": self.operation.message_group,
                "prewarm_iterations": self.config.prewarm_iterations,
                "run_iterations": self.config.run_iterations,
                "message_length": self.config.payload_size,
                "sharing_policy": self.policy.value,
                "substrate": repr(self.substrate),
            },
        )


def run_benchmark(
    config: BenchmarkConfig,
    operation: MeasuredOperation,
    mode: BenchmarkMode,
    messages: Optional[Sequence[Message]] = None,
) -> List[BenchmarkResult]:
    """Run all four stages and return one result per stage, in stage order."""
    return SPSBenchmark(config, operation, mode, messages).run()
