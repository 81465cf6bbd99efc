from __future__ import annotations
"""Reporting sinks: boxed console output and LaTeX macro export.

The core hands over finished result records; everything presentational
happens here.
"""

import pathlib
import re
from typing import List

from spsbench import BenchmarkConfig, BenchmarkMode, BenchmarkResult, BenchmarkSummary, BenchmarkTimes
from spsbench.metrics import OperationCountTable

CONSOLE_WIDTH = 120
EXPORT_DIR = "output"

_ALPHA = re.compile(r"^[A-Za-z]+$")

STAGE_TITLES = {
    "setup": "Setup",
    "keyGen": "KeyGen",
    "sign": "Sign",
    "verify": "Verify",
}

# TeX macro suffix per group (G1 -> G, G2 -> H, GT -> T)
GROUP_TEX_NAMES = (("G1", "G"), ("G2", "H"), ("GT", "T"))


def pad_string(s: str, target_length: int = CONSOLE_WIDTH) -> str:
    """Pad right and wrap in a `* ... *` box line."""
    width = target_length - 3
    return f"* {s:<{width}}*"


def separator(target_length: int = CONSOLE_WIDTH) -> str:
    return pad_string("", target_length).replace(" ", "-")


def format_config(config: BenchmarkConfig, mode: BenchmarkMode) -> str:
    label = "[Counting]" if mode is BenchmarkMode.COUNTING else "[Timer]"
    substrate = config.substrate_for(mode)
    return "\n".join([
        separator(),
        pad_string(f"Running {label} benchmark with config... "),
        pad_string(repr(substrate)),
        pad_string(config.to_pretty_string()),
        separator(),
    ])


def format_times(times: BenchmarkTimes) -> str:
    return pad_string(
        f"*** Times measured :: avg: {times.avg_ms:.4f} ms  |  min: {times.min_ms:.4f} ms  "
        f"|  max: {times.max_ms:.4f} ms  | total: {times.sum_ms:.4f} ms"
    )


def format_counts(stage: str, table: OperationCountTable) -> List[str]:
    lines = []
    for structure, _ in GROUP_TEX_NAMES:
        c = table.get(stage, structure)
        lines.append(pad_string(
            f"*** {structure}: total {c.total} (ops {c.ops}, sq {c.squarings}, "
            f"inv {c.inversions}, exp {c.exponentiations})"
        ))
    lines.append(pad_string(f"*** pairings: {table.pairings(stage)}"))
    return lines


def format_result(result: BenchmarkResult, scheme: str = "") -> str:
    tag = "TIME" if result.times is not None else "COUNT"
    lines = [pad_string(f"[DONE][{tag}] {result.stage} [{scheme}] benchmark...")]
    if result.times is not None:
        lines.append(format_times(result.times))
    if result.counts is not None:
        lines.extend(format_counts(result.stage, result.counts))
    if result.anomalous:
        lines.append(pad_string(f"!!! {result.verify_failures} verification(s) returned false"))
    lines.append(separator())
    return "\n".join(lines)


# -- LaTeX export ----------------------------------------------------------

def tex_scheme_name(scheme: str) -> str:
    """'groth15-g1' -> 'GrothG': digits dropped, parts capitalised."""
    parts = re.split(r"[^A-Za-z]+", re.sub(r"[0-9]+", "", scheme))
    return "".join(p[:1].upper() + p[1:] for p in parts if p)


def _require_alpha(*names: str) -> None:
    for name in names:
        if not _ALPHA.match(name or ""):
            raise ValueError("LaTeX commands cannot contain non-alpha characters!")


def _mode_title(mode: str) -> str:
    return BenchmarkMode(mode).value.capitalize()


def config_tex_command(scheme: str, mode: str, config_name: str, value: int) -> str:
    _require_alpha(scheme, config_name)
    return f"\\newcommand{{\\{scheme}{_mode_title(mode)}Config{config_name}}}{{{int(value)}}}"


def generate_config_tex_commands(config: BenchmarkConfig, mode: str, scheme: str) -> List[str]:
    return [
        config_tex_command(scheme, mode, "Iterations", config.run_iterations),
        config_tex_command(scheme, mode, "MessageLength", config.payload_size),
        config_tex_command(scheme, mode, "PrewarmIterations", config.prewarm_iterations),
    ]


def time_result_tex_command(operation: str, scheme: str, timer: str, value_ms: float) -> str:
    _require_alpha(operation, scheme, timer)
    return f"\\newcommand{{\\{scheme}Time{operation}{timer}}}{{{value_ms:,.2f}}}"


def generate_time_result_tex_commands(operation: str, scheme: str, times: BenchmarkTimes) -> List[str]:
    return [
        time_result_tex_command(operation, scheme, "Avg", times.avg_ms),
        time_result_tex_command(operation, scheme, "Min", times.min_ms),
        time_result_tex_command(operation, scheme, "Max", times.max_ms),
        time_result_tex_command(operation, scheme, "Sum", times.sum_ms),
    ]


def generate_counting_result_tex_commands(
    operation: str, bucket: str, scheme: str, table: OperationCountTable
) -> List[str]:
    _require_alpha(operation, scheme)
    commands = [
        f"\\newcommand{{\\{scheme}Count{operation}{tex}}}{{{table.total(bucket, structure)}}}"
        for structure, tex in GROUP_TEX_NAMES
    ]
    commands.append(f"\\newcommand{{\\{scheme}Count{operation}P}}{{{table.pairings(bucket)}}}")
    return commands


def render_tex(summary: BenchmarkSummary, config: BenchmarkConfig) -> str:
    scheme = tex_scheme_name(summary.scheme)
    lines = generate_config_tex_commands(config, summary.mode, scheme)
    for result in summary.results:
        title = STAGE_TITLES[result.stage]
        if result.times is not None:
            lines.extend(generate_time_result_tex_commands(title, scheme, result.times))
        if result.counts is not None:
            lines.extend(generate_counting_result_tex_commands(title, result.stage, scheme, result.counts))
    return "\n".join(lines) + "\n"


def export_tex(summary: BenchmarkSummary, config: BenchmarkConfig, out_dir: str | None = None) -> pathlib.Path:
    directory = pathlib.Path(out_dir or EXPORT_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    filename = f"{summary.mode}_{summary.scheme}_results.tex".lower()
    path = directory / filename
    path.write_text(render_tex(summary, config), encoding="utf-8")
    return path
