from __future__ import annotations

import json
from pathlib import Path

import typer

from rollout_analysis.config import AppConfig, load_config
from rollout_analysis.io.snapshot import load_analysis_run
from rollout_analysis.io.write import write_summary
from rollout_analysis.logging import configure_logging
from rollout_analysis.models import AnalysisRunInfo
from rollout_analysis.pipeline.run_all import run_all
from rollout_analysis.report.payload import build_view_payload
from rollout_analysis.transforms.summary import build_analysis_summary

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None) -> AppConfig:
    return load_config(config_path)


def _load_run(snapshot: Path) -> AnalysisRunInfo:
    try:
        return load_analysis_run(snapshot)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="SNAPSHOT") from exc


@app.command()
def transform(
    snapshot: Path = typer.Argument(..., exists=True, readable=True, resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path | None = typer.Option(
        None,
        resolve_path=True,
        help="Write the view payload to this JSON file instead of stdout.",
    ),
) -> None:
    """Transform an analysis run (JSON or YAML) into chart/table-ready metrics."""
    cfg = _load_app_config(config)
    configure_logging(cfg.logging)
    info = _load_run(snapshot)
    try:
        payload = build_view_payload(info, cfg)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="SNAPSHOT") from exc

    if out is None:
        typer.echo(json.dumps(payload, indent=cfg.outputs.summary_indent or None, sort_keys=True))
        return
    write_summary(payload, out, cfg.outputs.summary_indent)
    typer.echo(f"Payload written to: {out}")


@app.command()
def summary(
    snapshot: Path = typer.Argument(..., exists=True, readable=True, resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Print the overall analysis status for an analysis run."""
    cfg = _load_app_config(config)
    configure_logging(cfg.logging)
    result = build_analysis_summary(_load_run(snapshot))
    typer.echo(result.title)
    typer.echo(f"- phase: {result.phase}")
    if result.substatus is not None:
        typer.echo(f"- substatus: {result.substatus.value}")
    if result.message:
        typer.echo(f"- message: {result.message}")
    if result.start_time is not None:
        typer.echo(f"- start_time: {result.start_time}")
    if result.end_time is not None:
        typer.echo(f"- end_time: {result.end_time}")


@app.command("run-all")
def run_all_command(
    snapshot: Path = typer.Argument(..., exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Write summary JSON and per-metric measurement tables to out/."""
    cfg = _load_app_config(config)
    configure_logging(cfg.logging)
    try:
        summary_path = run_all(snapshot_path=snapshot, out_dir=out, config=cfg)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="SNAPSHOT") from exc
    typer.echo(f"Run complete. Metrics: {summary_path}")


if __name__ == "__main__":
    app()
