"""
visualizations.py

Motion parameter QC figure.

The figure is saved to disk and the path to the saved file is returned.
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for file saving
import matplotlib.pyplot as plt
from pathlib import Path

HEAD_RADIUS_MM = 50.0


def framewise_displacement(params, radius=HEAD_RADIUS_MM):
    """
    Framewise displacement (Power et al., 2012).

    Parameters
    ----------
    params : ndarray, shape (T, 6)
        Motion parameters (tx, ty, tz in mm, yaw, roll, pitch in degrees).
    radius : float, optional
        Sphere radius (mm) used to turn rotations into arc length.

    Returns
    -------
    fd : ndarray, shape (T,)
        Displacement per volume, 0 for the first volume.
    """
    params = np.asarray(params, dtype=float)
    motion = params.copy()
    motion[:, 3:] = np.radians(motion[:, 3:]) * radius
    fd = np.zeros(len(motion))
    fd[1:] = np.sum(np.abs(np.diff(motion, axis=0)), axis=1)
    return fd


def plot_motion_parameters(
    params,
    output_dir,
    stem,
    verbose=True
):
    """
    Create the motion parameter summary figure.

    Shows translations, rotations and framewise displacement across volumes.

    Parameters
    ----------
    params : ndarray, shape (T, 6)
        Motion parameters as written by the realignment brick.
    output_dir : str or Path
        Output directory; the figure goes to ``output_dir/visualizations``.
    stem : str
        Scan identifier for the filename.
    verbose : bool, optional
        Print progress information.

    Returns
    -------
    fig_path : Path
        Path to saved figure.
    """
    params = np.asarray(params, dtype=float)
    output_dir = Path(output_dir)
    viz_dir = output_dir / "visualizations"
    viz_dir.mkdir(parents=True, exist_ok=True)

    n_vols = params.shape[0]
    volumes = np.arange(n_vols)
    fd = framewise_displacement(params)

    fig, axes = plt.subplots(3, 1, figsize=(12, 10), sharex=True)
    fig.suptitle(f"Realignment QC - {stem}\n{n_vols} volumes",
                 fontsize=14, fontweight='bold')

    ax = axes[0]
    ax.plot(volumes, params[:, 0], 'r-', label='X', linewidth=1.5)
    ax.plot(volumes, params[:, 1], 'g-', label='Y', linewidth=1.5)
    ax.plot(volumes, params[:, 2], 'b-', label='Z', linewidth=1.5)
    ax.axhline(y=0, color='k', linestyle='--', linewidth=0.5)
    ax.set_ylabel('Translation (mm)')
    ax.set_title('Translation')
    ax.legend(loc='upper right')
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    ax.plot(volumes, params[:, 3], 'r-', label='Yaw (Z)', linewidth=1.5)
    ax.plot(volumes, params[:, 4], 'g-', label='Roll (Y)', linewidth=1.5)
    ax.plot(volumes, params[:, 5], 'b-', label='Pitch (X)', linewidth=1.5)
    ax.axhline(y=0, color='k', linestyle='--', linewidth=0.5)
    ax.set_ylabel('Rotation (degrees)')
    ax.set_title('Rotation')
    ax.legend(loc='upper right')
    ax.grid(True, alpha=0.3)

    ax = axes[2]
    ax.plot(volumes, fd, 'k-', linewidth=1.5)
    ax.set_xlabel('Volume')
    ax.set_ylabel('FD (mm)')
    ax.set_title('Framewise displacement')
    ax.grid(True, alpha=0.3)

    max_trans = np.max(np.abs(params[:, :3])) if n_vols else 0.0
    max_rot = np.max(np.abs(params[:, 3:])) if n_vols else 0.0
    fig.text(0.5, 0.02,
             f"Max displacement: {max_trans:.2f} mm | Max rotation: {max_rot:.2f}° "
             f"| Mean FD: {fd.mean():.2f} mm",
             ha='center', fontsize=11, style='italic')

    plt.tight_layout(rect=[0, 0.04, 1, 0.95])

    fig_path = viz_dir / f"{stem}_motion_qc.png"
    plt.savefig(fig_path, dpi=150, bbox_inches='tight', facecolor='white')
    plt.close()

    if verbose:
        print(f"✓ Motion QC: {fig_path}")

    return fig_path
