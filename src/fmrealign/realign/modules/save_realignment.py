"""
save_realignment.py

Save realignment outputs to disk.
"""

import logging
from pathlib import Path

import numpy as np
from scipy.io import loadmat, savemat

from .options import RealignOutputs

logger = logging.getLogger(__name__)

TRANSF_VARIABLE = "transf"
PARAMS_FORMAT = "%.6f"


def _check_stack(name: str, transf: np.ndarray, n_vols: int) -> None:
    transf = np.asarray(transf)
    if transf.shape != (4, 4, n_vols):
        raise ValueError(f"{name} must be 4x4x{n_vols}, got shape {transf.shape}")


def save_realignment(
    outputs: RealignOutputs,
    params: np.ndarray,
    transf_w2w: np.ndarray,
    transf_v2w: np.ndarray,
) -> dict[str, Path]:
    """
    Write motion parameters and transform stacks.

    Parameters
    ----------
    outputs : RealignOutputs
        Destination paths. Outputs set to None are not written.
    params : ndarray, shape (T, 6)
        Motion parameters (tx, ty, tz, yaw, roll, pitch).
    transf_w2w : ndarray, shape (4, 4, T)
        World-to-world matrices.
    transf_v2w : ndarray, shape (4, 4, T)
        Voxel-to-world matrices.

    Returns
    -------
    output_paths : dict[str, Path]
        Paths of the files actually written, keyed by output name.
    """
    params = np.asarray(params, dtype=float)
    if params.ndim != 2 or params.shape[1] != 6:
        raise ValueError(f"params must be Tx6, got shape {params.shape}")
    n_vols = params.shape[0]
    _check_stack("transf_w2w", transf_w2w, n_vols)
    _check_stack("transf_v2w", transf_v2w, n_vols)

    output_paths = {}

    if outputs.params is not None:
        outputs.params.parent.mkdir(parents=True, exist_ok=True)
        np.savetxt(outputs.params, params, fmt=PARAMS_FORMAT)
        output_paths['params'] = outputs.params
        logger.info(f"✓ Saved motion parameters: {outputs.params}")

    for name, transf in (("transf_w2w", transf_w2w), ("transf_v2w", transf_v2w)):
        path = getattr(outputs, name)
        if path is None:
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        savemat(str(path), {TRANSF_VARIABLE: np.asarray(transf, dtype=float)})
        output_paths[name] = path
        logger.info(f"✓ Saved {name} matrices: {path}")

    return output_paths


def load_transforms(path: str | Path) -> np.ndarray:
    """Load a 4x4xT transform stack written by :func:`save_realignment`."""
    transf = loadmat(str(path))[TRANSF_VARIABLE]
    # MATLAB drops trailing singleton dimensions
    if transf.ndim == 2:
        transf = transf[:, :, np.newaxis]
    return transf


def load_motion_parameters(path: str | Path) -> np.ndarray:
    """Load a Tx6 motion parameter file."""
    return np.loadtxt(path, ndmin=2)
