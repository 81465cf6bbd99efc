from __future__ import annotations
import json
import logging
from typing import Optional

import typer

from spsbench import BenchmarkError, BenchmarkMode, default_config, registry
from . import report
from .runners.common import _build_export_payload, _load_adapters, export_json, get_operation, run_scheme

app = typer.Typer(add_completion=False, help="SPS benchmark CLI (timing and operation counting)")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("list-schemes")
def list_schemes():
    """List registered schemes available via adapters."""
    _load_adapters()
    for name in registry.list().keys():
        typer.echo(f"- {name}")


@app.command()
def demo(
    name: str,
    message_length: int = typer.Option(4, help="Elements per message vector"),
):
    """Run one setup/keygen/sign/verify with the selected scheme (no timing)."""
    _load_adapters()
    try:
        config = default_config(0, 1, message_length)
        operation = get_operation(name)
        substrate = config.timing_substrate
        instance = operation.construct(substrate, message_length)
        group = substrate.group(operation.message_group)
        message = tuple(group.random_element() for _ in range(message_length))
        key_pair = instance.generate_key_pair(message_length)
        sig = instance.sign(key_pair.signing_key, message)
        ok = instance.verify(message, sig, key_pair.verification_key)
    except (BenchmarkError, KeyError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"[SIG] {name}: verify={ok}")


@app.command()
def run(
    name: str,
    mode: BenchmarkMode = typer.Option(BenchmarkMode.TIME, case_sensitive=False, help="time | counting"),
    runs: int = typer.Option(100, help="Measured iterations per stage"),
    prewarm: int = typer.Option(20, help="Pre-warm iterations per stage (<= runs)"),
    message_length: int = typer.Option(32, help="Elements per message vector"),
    export: str = typer.Option("", help="Write a JSON summary to this path"),
    export_tex: str = typer.Option("", help="Write LaTeX result macros into this directory"),
    print_json: bool = typer.Option(False, help="Echo the JSON summary"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log stage progress"),
):
    """
    Run the setup/keyGen/sign/verify benchmark for one scheme.
    """
    _configure_logging(verbose)
    _load_adapters()
    try:
        config = default_config(prewarm, runs, message_length)
        typer.echo(report.format_config(config, mode))
        summary = run_scheme(name, mode, config)
    except (BenchmarkError, KeyError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    for result in summary.results:
        typer.echo(report.format_result(result, summary.meta.get("instance_class", name)))

    path = export_json(summary, export)
    if path is not None:
        typer.echo(f"JSON summary written to {path}")
    if export_tex:
        tex_path = report.export_tex(summary, config, export_tex)
        typer.echo(f"BenchmarkFile created under: {tex_path}")
    if print_json:
        typer.echo(json.dumps(_build_export_payload(summary), indent=2))
    if any(r.anomalous for r in summary.results):
        typer.echo("Warning: some verifications returned false", err=True)


def app_main(argv: Optional[list[str]] = None):
    app(args=argv)


if __name__ == "__main__":
    app_main()
