"""
Simulation results visualization.

This module provides plots of scan images, scatter-count histograms and
outgoing directions, together with a printed statistical summary.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import numpy as np
import matplotlib.pyplot as plt

from .. import config
from ..core.simulation import RayBatchResult, ScanResult


def _finish(fig, save_path: Optional[str], suffix: str, show: bool, dpi: int) -> Optional[str]:
    saved = None
    if save_path:
        saved = f"{save_path}{suffix}"
        Path(saved).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(saved, dpi=dpi, bbox_inches='tight')
        print(f"[info] Saved figure to {saved}")
    if show:
        plt.show()
    else:
        plt.close(fig)
    return saved


def plot_scan_image(
    result: ScanResult,
    aperture: Optional[int] = None,
    save_path: Optional[str] = None,
    show: bool = False,
    dpi: int = config.PLOT_DPI,
) -> Optional[str]:
    """Plot the simulated image of a rectangular scan.

    Parameters
    ----------
    result : ScanResult
        Scan to plot.
    aperture : int, optional
        1-based aperture index; all apertures are summed when omitted.
    save_path : str, optional
        Base path for saving the figure (".png" is appended).
    show : bool
        Whether to display the figure interactively.
    dpi : int
        Resolution for saved figure.

    Returns
    -------
    str or None
        Path of the saved figure.
    """
    image = result.image(aperture)
    x, z = result.x_positions, result.z_positions
    step_x = x[1] - x[0] if len(x) > 1 else 1.0
    step_z = z[1] - z[0] if len(z) > 1 else 1.0
    extent = [x[0] - step_x / 2, x[-1] + step_x / 2, z[0] - step_z / 2, z[-1] + step_z / 2]

    fig, axes = plt.subplots(1, 2, figsize=(13, 5.5))

    ax1 = axes[0]
    shown = ax1.imshow(image, origin='lower', extent=extent, cmap=config.SCAN_IMAGE_CMAP, aspect='equal')
    label = "all apertures" if aperture is None else f"aperture {aperture}"
    ax1.set_xlabel('x (mm)')
    ax1.set_ylabel('z (mm)')
    ax1.set_title(f'Simulated image ({label})')
    plt.colorbar(shown, ax=ax1, label='Detected rays')

    # Single vs multiple scattering contributions
    ax2 = axes[1]
    single = result.single_scatter_image().sum()
    multiple = result.multiple_scatter_image().sum()
    direct = result.histograms[0].sum()
    bars = ax2.bar(['Direct', 'Single', 'Multiple'], [direct, single, multiple],
                   color=['gray', 'teal', 'purple'], alpha=0.7)
    ax2.bar_label(bars)
    ax2.set_ylabel('Detected rays (all pixels)')
    ax2.set_title('Contribution by number of scatters')
    ax2.grid(True, axis='y', alpha=0.3)

    plt.tight_layout()
    return _finish(fig, save_path, ".png", show, dpi)


def plot_effuse_image(
    result: ScanResult,
    save_path: Optional[str] = None,
    show: bool = False,
    dpi: int = config.PLOT_DPI,
) -> Optional[str]:
    """Image formed by the detected rays of the effusive beam alone."""
    x, z = result.x_positions, result.z_positions
    step_x = x[1] - x[0] if len(x) > 1 else 1.0
    step_z = z[1] - z[0] if len(z) > 1 else 1.0
    extent = [x[0] - step_x / 2, x[-1] + step_x / 2, z[0] - step_z / 2, z[-1] + step_z / 2]

    fig, ax = plt.subplots(figsize=(7, 5.5))
    shown = ax.imshow(result.effuse_counts, origin='lower', extent=extent,
                      cmap=config.SCAN_IMAGE_CMAP, aspect='equal')
    ax.set_xlabel('x (mm)')
    ax.set_ylabel('z (mm)')
    ax.set_title(f'Effusive beam ({result.n_effuse} rays per pixel)')
    plt.colorbar(shown, ax=ax, label='Detected rays')

    plt.tight_layout()
    return _finish(fig, save_path, ".png", show, dpi)


def plot_scatter_histogram(
    histogram: np.ndarray,
    save_path: Optional[str] = None,
    show: bool = False,
    dpi: int = config.PLOT_DPI,
) -> Optional[str]:
    """Bar chart of detected rays against their number of scattering events."""
    histogram = np.asarray(histogram)
    total = histogram.sum()

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.bar(np.arange(len(histogram)), histogram, color='teal', alpha=0.7)
    if total > 0:
        mean = np.dot(np.arange(len(histogram)), histogram) / total
        ax.axvline(mean, color='red', linestyle='--', linewidth=2, label=f'Mean: {mean:.2f}')
        ax.legend()
    ax.set_xlabel('Number of scattering events')
    ax.set_ylabel('Detected rays')
    ax.set_title('Scattering events of detected rays')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return _finish(fig, save_path, "_histogram.png", show, dpi)


def plot_outgoing_directions(
    directions: np.ndarray,
    save_path: Optional[str] = None,
    show: bool = False,
    dpi: int = config.PLOT_DPI,
) -> Optional[str]:
    """Plot the angular distribution of final ray directions.

    Polar angles are measured from the +y axis (the back wall normal facing
    the sample) and azimuths about it from +x.
    """
    directions = np.asarray(directions, dtype=float).reshape(-1, 3)
    if len(directions) == 0:
        print("[warning] No directions to plot.")
        return None

    theta = np.degrees(np.arccos(np.clip(directions[:, 1], -1.0, 1.0)))
    phi = np.arctan2(directions[:, 2], directions[:, 0])

    fig = plt.figure(figsize=(13, 5.5))
    ax1 = fig.add_subplot(1, 2, 1)
    ax1.hist(theta, bins=45, color='purple', alpha=0.7)
    ax1.axvline(np.mean(theta), color='red', linestyle='--', linewidth=2,
                label=f'Mean: {np.mean(theta):.2f}°')
    ax1.set_xlabel('Polar angle from +y (deg)')
    ax1.set_ylabel('Count')
    ax1.set_title('Polar angle distribution')
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    ax2 = fig.add_subplot(1, 2, 2, projection='polar')
    ax2.scatter(phi, theta, s=8, alpha=0.5, color='teal')
    ax2.set_title('Direction map (azimuth, polar angle)')

    plt.tight_layout()
    return _finish(fig, save_path, "_directions.png", show, dpi)


def print_statistics(result: Union[ScanResult, RayBatchResult]):
    """Print statistical summary of a scan or a batch of rays.

    Parameters
    ----------
    result : ScanResult or RayBatchResult
        Simulation output to summarise.
    """
    if isinstance(result, ScanResult):
        n_pixels = result.killed.size
        n_total = n_pixels * result.n_rays
        detected = int(result.counts.sum())
        killed = int(result.killed.sum())
        escaped = int(result.escaped.sum())
        per_aperture = result.counts.sum(axis=(0, 1))
        histogram = result.histograms.sum(axis=(1, 2))
        title = "SCAN STATISTICS"
        effuse = (int(result.effuse_counts.sum()), n_pixels * result.n_effuse)
    else:
        n_pixels = 1
        n_total = result.n_rays
        detected = result.counters.detected
        killed = result.counters.killed
        escaped = result.counters.escaped
        per_aperture = result.counters.per_aperture
        histogram = result.histogram
        title = "RAY BATCH STATISTICS"
        effuse = (0, 0)

    if n_total == 0:
        print("\n[Statistics] No rays to display.")
        return

    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)
    print(f"Pixels: {n_pixels}")
    print(f"Total rays traced: {n_total}")
    print(f"Rays detected: {detected} ({100 * detected / n_total:.2f}%)")
    print(f"Rays killed: {killed} ({100 * killed / n_total:.2f}%)")
    print(f"Rays escaped: {escaped} ({100 * escaped / n_total:.2f}%)")
    if effuse[1]:
        print(f"Effusive rays detected: {effuse[0]} of {effuse[1]}")
    print()
    for i, count in enumerate(per_aperture, start=1):
        print(f"Aperture {i}: {int(count)} rays")
    print()
    if detected:
        counts = np.arange(len(histogram))
        mean = np.dot(counts, histogram) / detected
        print("Scattering events of detected rays:")
        print(f"  Mean: {mean:.4f}, Max: {int(counts[histogram > 0].max())}")
        print(f"  Single scattering: {int(histogram[1]) if len(histogram) > 1 else 0}")
        print(f"  Multiple scattering: {int(histogram[2:].sum())}")
    if isinstance(result, ScanResult):
        image = result.image()
        print(f"Image counts per pixel: mean {image.mean():.2f}, "
              f"range [{image.min()}, {image.max()}]")
    print("=" * 60 + "\n")
