from __future__ import annotations
"""Shared helpers for CLI runners.

Includes adapter bootstrap, the scheme runner that wires a registered
adapter into the orchestrator, environment metadata and JSON export.
"""

import copy
import importlib
import importlib.util
import json
import logging
import pathlib
import platform
import subprocess
import sys
from typing import Any, Dict, Optional, Sequence

from spsbench import (
    BenchmarkConfig,
    BenchmarkMode,
    BenchmarkSummary,
    SPSBenchmark,
    registry,
)
from spsbench.interfaces import Message

log = logging.getLogger(__name__)

_HERE = pathlib.Path(__file__).resolve()

try:
    _PROJECT_ROOT = next(p for p in _HERE.parents if (p / "libs").exists())
except StopIteration:
    _PROJECT_ROOT = _HERE.parents[0]

_ADAPTER_PATHS = {
    "spsbench_sps": _PROJECT_ROOT / "libs" / "adapters" / "sps" / "src",
    "spsbench_rsa": _PROJECT_ROOT / "libs" / "adapters" / "rsa" / "src",
}

_ENVIRONMENT_CACHE: Dict[str, Any] | None = None


def _detect_cpu_model() -> str | None:
    system = platform.system()
    try:
        if system == "Darwin":
            out = subprocess.check_output(
                ["sysctl", "-n", "machdep.cpu.brand_string"],
                stderr=subprocess.DEVNULL,
                text=True,
            ).strip()
            if out:
                return out
        elif system == "Linux":
            cpuinfo = pathlib.Path("/proc/cpuinfo")
            if cpuinfo.exists():
                for line in cpuinfo.read_text(encoding="utf-8", errors="ignore").splitlines():
                    if line.lower().startswith("model name"):
                        return line.split(":", 1)[1].strip()
    except (OSError, subprocess.SubprocessError):
        log.debug("cpu model detection failed", exc_info=True)
    uname = platform.uname()
    for val in (getattr(uname, "processor", ""), getattr(uname, "machine", "")):
        if val:
            return val
    return None


def _collect_environment_meta() -> Dict[str, Any]:
    global _ENVIRONMENT_CACHE
    if _ENVIRONMENT_CACHE is None:
        info: Dict[str, Any] = {}
        cpu_model = _detect_cpu_model()
        if cpu_model:
            info["cpu_model"] = cpu_model
        info["os"] = platform.platform(aliased=True)
        info["python"] = platform.python_version()
        _ENVIRONMENT_CACHE = info
    return copy.deepcopy(_ENVIRONMENT_CACHE)


def _load_adapters() -> None:
    for mod in _ADAPTER_PATHS:
        spec = importlib.util.find_spec(mod)
        if spec is None:
            # running from a checkout without installing the adapter packages
            candidate = _ADAPTER_PATHS[mod]
            if candidate.exists() and str(candidate) not in sys.path:
                sys.path.append(str(candidate))
                spec = importlib.util.find_spec(mod)
        if spec is None:
            log.warning("[adapter optional] %s not installed; its schemes are unavailable", mod)
            continue
        try:
            importlib.import_module(mod)
        except ImportError:
            log.warning("[adapter import error] %s", mod, exc_info=True)


def get_operation(name: str):
    cls_or_obj = registry.get(name)
    return cls_or_obj() if isinstance(cls_or_obj, type) else cls_or_obj


def run_scheme(
    name: str,
    mode: BenchmarkMode,
    config: BenchmarkConfig,
    *,
    messages: Optional[Sequence[Message]] = None,
) -> BenchmarkSummary:
    """Run the four lifecycle stages of the registered scheme `name`."""
    operation = get_operation(name)
    bench = SPSBenchmark(config, operation, mode, messages)
    bench.run()
    summary = bench.summary()
    env_meta = _collect_environment_meta()
    if env_meta:
        summary.meta["environment"] = env_meta
    return summary


def _build_export_payload(summary: BenchmarkSummary) -> Dict[str, Any]:
    return {
        "scheme": summary.scheme,
        "mode": summary.mode,
        "meta": summary.meta,
        "results": [r.as_dict() for r in summary.results],
        "anomalies": {
            r.stage: r.verify_failures for r in summary.results if r.anomalous
        },
    }


def _repo_root() -> pathlib.Path:
    """Best-effort detection of the repository root (directory containing .git).
    Falls back to the current working directory if not found.
    """
    here = pathlib.Path(__file__).resolve()
    for p in (here, *here.parents):
        if (p / ".git").exists():
            return p
    return pathlib.Path.cwd()


def _resolve_export_path(export_path: str) -> pathlib.Path:
    # Normalize Windows-style separators on POSIX if users pass e.g. "results\file.json"
    if "\\" in export_path and ":" not in export_path:
        export_path = export_path.replace("\\", "/")
    path = pathlib.Path(export_path)
    if not path.is_absolute():
        path = _repo_root() / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def export_json(summary: BenchmarkSummary, export_path: str | None) -> Optional[pathlib.Path]:
    if not export_path:
        return None
    path = _resolve_export_path(export_path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(_build_export_payload(summary), f, indent=2)
    return path


