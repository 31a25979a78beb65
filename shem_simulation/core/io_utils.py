"""
Data import/export utilities for detected rays, ray paths and scan results.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import List, Sequence

import numpy as np
import pandas as pd

from .data_classes import TraceResult
from .simulation import RayBatchResult, ScanResult

DETECTED_RAY_COLUMNS = [
    "ray_id",
    "aperture",
    "n_scatters",
    "position_x_mm",
    "position_y_mm",
    "position_z_mm",
    "direction_x",
    "direction_y",
    "direction_z",
]


def export_detected_rays_to_csv(batch: RayBatchResult, filename: str = "detected_rays.csv"):
    """Export the detected rays kept in a batch result to a CSV file.

    Parameters
    ----------
    batch : RayBatchResult
        Result of :func:`trace_rays` run with ``keep_detected=True``.
    filename : str
        Output CSV filename.
    """
    if batch.final_positions is None:
        raise ValueError("Batch result does not keep detected rays; trace with keep_detected=True")
    if len(batch.final_positions) == 0:
        print("[warning] No detected rays to export.")
        return

    output_path = Path(filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", newline="", encoding="utf-8") as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(DETECTED_RAY_COLUMNS)
        rows = zip(batch.apertures, batch.scatter_counts, batch.final_positions, batch.final_directions)
        for idx, (aperture, n_scatters, position, direction) in enumerate(rows, start=1):
            writer.writerow([idx, int(aperture), int(n_scatters), *position, *direction])

    print(f"[info] Detected rays exported to {filename}")
    print(f"[info] Total records: {len(batch.final_positions)}")


def load_detected_rays(filename: str) -> pd.DataFrame:
    """Read a detected-ray CSV back as a DataFrame."""
    if not Path(filename).is_file():
        raise FileNotFoundError(f"Detected ray file '{filename}' does not exist")
    df = pd.read_csv(filename)
    missing = [column for column in DETECTED_RAY_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"'{filename}' is missing columns: {missing}")
    return df


def export_ray_paths_to_csv(results: Sequence[TraceResult], filename: str = "ray_paths.csv"):
    """Export the recorded paths of traced rays, one row per visited point."""
    if not results:
        print("[warning] No ray paths to export.")
        return

    output_path = Path(filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    total_points = 0
    with open(output_path, "w", newline="", encoding="utf-8") as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(["ray_id", "step_id", "state", "position_x_mm", "position_y_mm", "position_z_mm"])
        for ray_id, result in enumerate(results, start=1):
            points: List[np.ndarray] = result.path if result.path else [result.position]
            for step_id, point in enumerate(points):
                writer.writerow([ray_id, step_id, result.state.name, point[0], point[1], point[2]])
            total_points += len(points)

    print(f"[info] Ray paths exported to {filename}")
    print(f"[info] Total rays: {len(results)}, total path points: {total_points}")


def save_scan_result(result: ScanResult, filename: str = "scan_result.npz"):
    """Save a scan result to a compressed ``.npz`` archive."""
    output_path = Path(filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    metadata = {key: np.asarray(-1 if value is None else value) for key, value in result.metadata.items()}
    np.savez_compressed(
        output_path,
        x_positions=result.x_positions,
        z_positions=result.z_positions,
        counts=result.counts,
        killed=result.killed,
        escaped=result.escaped,
        histograms=result.histograms,
        n_rays=np.asarray(result.n_rays),
        effuse_counts=result.effuse_counts,
        n_effuse=np.asarray(result.n_effuse),
        **{f"meta_{key}": value for key, value in metadata.items()},
    )
    print(f"[info] Scan result saved to {output_path}")


def load_scan_result(filename: str) -> ScanResult:
    """Load a scan result written by :func:`save_scan_result`."""
    if not Path(filename).is_file():
        raise FileNotFoundError(f"Scan result file '{filename}' does not exist")
    with np.load(filename) as data:
        metadata = {
            key[len("meta_"):]: data[key].item()
            for key in data.files
            if key.startswith("meta_")
        }
        if metadata.get("seed") == -1:
            metadata["seed"] = None
        return ScanResult(
            x_positions=data["x_positions"],
            z_positions=data["z_positions"],
            counts=data["counts"],
            killed=data["killed"],
            escaped=data["escaped"],
            histograms=data["histograms"],
            n_rays=int(data["n_rays"]),
            effuse_counts=data["effuse_counts"] if "effuse_counts" in data.files else None,
            n_effuse=int(data["n_effuse"]) if "n_effuse" in data.files else 0,
            metadata=metadata,
        )
