from __future__ import annotations

import logging
from pathlib import Path

from rollout_analysis.config import AppConfig
from rollout_analysis.io.snapshot import load_analysis_run
from rollout_analysis.io.write import write_summary, write_table
from rollout_analysis.paths import build_output_paths
from rollout_analysis.report.payload import measurement_table, table_file_stem
from rollout_analysis.transforms.metrics import sorted_metrics, transform_metrics
from rollout_analysis.transforms.summary import build_analysis_summary

LOGGER = logging.getLogger(__name__)


def run_all(snapshot_path: Path, out_dir: Path, config: AppConfig) -> Path:
    """Transform an analysis run file and write summary JSON plus per-metric tables."""
    paths = build_output_paths(out_dir)
    info = load_analysis_run(snapshot_path)
    metrics = sorted_metrics(transform_metrics(info.snapshot, config=config))
    indent = config.outputs.summary_indent

    write_summary(build_analysis_summary(info).to_dict(), paths.summary / "analysis.json", indent)
    summary_path = write_summary(
        {"name": info.name, "metrics": [metric.to_dict() for metric in metrics]},
        paths.summary / "metrics.json",
        indent,
    )

    table_format = config.outputs.tables_format
    for metric in metrics:
        write_table(
            measurement_table(metric),
            paths.tables / f"{table_file_stem(metric.name)}.{table_format}",
            fmt=table_format,
        )
    LOGGER.info("Wrote %d metric tables to %s", len(metrics), paths.tables)
    return summary_path
