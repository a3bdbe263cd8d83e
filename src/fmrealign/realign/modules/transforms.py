"""
transforms.py

Rigid-body matrix bookkeeping: composition, decomposition, world-to-world
conversion and motion parameters.

Rotations follow the SPM convention R = Rx(pitch) @ Ry(roll) @ Rz(yaw),
with angles in radians unless stated otherwise.
"""

import numpy as np


def rigid_matrix(translation, rotation) -> np.ndarray:
    """
    Build a 4x4 rigid-body matrix.

    Parameters
    ----------
    translation : array-like, shape (3,)
        Translation (tx, ty, tz) in mm.
    rotation : array-like, shape (3,)
        Rotation (pitch, roll, yaw) in radians, about x, y and z.

    Returns
    -------
    ndarray, shape (4, 4)
    """
    tx, ty, tz = np.asarray(translation, dtype=float)
    pitch, roll, yaw = np.asarray(rotation, dtype=float)

    rx = np.array([
        [1, 0, 0],
        [0, np.cos(pitch), np.sin(pitch)],
        [0, -np.sin(pitch), np.cos(pitch)],
    ])
    ry = np.array([
        [np.cos(roll), 0, np.sin(roll)],
        [0, 1, 0],
        [-np.sin(roll), 0, np.cos(roll)],
    ])
    rz = np.array([
        [np.cos(yaw), np.sin(yaw), 0],
        [-np.sin(yaw), np.cos(yaw), 0],
        [0, 0, 1],
    ])

    matrix = np.eye(4)
    matrix[:3, :3] = rx @ ry @ rz
    matrix[:3, 3] = [tx, ty, tz]
    return matrix


def rigid_parameters(matrix) -> tuple[np.ndarray, np.ndarray]:
    """
    Decompose a rigid 4x4 matrix into rotation angles and translation.

    Inverse of :func:`rigid_matrix`.

    Parameters
    ----------
    matrix : array-like, shape (4, 4)

    Returns
    -------
    rotation : ndarray, shape (3,)
        (pitch, roll, yaw) in radians.
    translation : ndarray, shape (3,)
        (tx, ty, tz) in mm.
    """
    matrix = np.asarray(matrix, dtype=float)
    if matrix.shape != (4, 4):
        raise ValueError(f"matrix must be 4x4, got shape {matrix.shape}")

    R = matrix[:3, :3]
    translation = matrix[:3, 3].copy()

    roll = np.arcsin(np.clip(R[0, 2], -1.0, 1.0))
    if np.isclose(abs(roll), np.pi / 2):
        # Gimbal lock: pitch and yaw share one degree of freedom
        pitch = 0.0
        yaw = np.arctan2(-R[1, 0], -R[2, 0] / R[0, 2])
    else:
        c = np.cos(roll)
        pitch = np.arctan2(R[1, 2] / c, R[2, 2] / c)
        yaw = np.arctan2(R[0, 1] / c, R[0, 0] / c)

    return np.array([pitch, roll, yaw]), translation


def world_to_world(transf_v2w, affine) -> np.ndarray:
    """
    Convert voxel-to-world matrices into world-to-world corrections.

    For each volume ``t``: ``w2w[..., t] = v2w[..., t] @ inv(affine)``, so
    that ``w2w[..., t] @ affine == v2w[..., t]``.

    Parameters
    ----------
    transf_v2w : ndarray, shape (4, 4, T)
        Estimated voxel-to-world matrices.
    affine : ndarray, shape (4, 4)
        Original voxel-to-world matrix of the series.

    Returns
    -------
    ndarray, shape (4, 4, T)
    """
    transf_v2w = np.asarray(transf_v2w, dtype=float)
    affine = np.asarray(affine, dtype=float)
    if transf_v2w.ndim != 3 or transf_v2w.shape[:2] != (4, 4):
        raise ValueError(f"transf_v2w must be 4x4xT, got shape {transf_v2w.shape}")
    if affine.shape != (4, 4):
        raise ValueError(f"affine must be 4x4, got shape {affine.shape}")

    # Solve X @ affine = v2w without forming the inverse
    stacked = np.moveaxis(transf_v2w, -1, 0)
    w2w = np.linalg.solve(affine.T, stacked.transpose(0, 2, 1)).transpose(0, 2, 1)
    return np.moveaxis(w2w, 0, -1)


def motion_parameters(transf_w2w) -> np.ndarray:
    """
    Motion parameters from world-to-world matrices.

    Parameters
    ----------
    transf_w2w : ndarray, shape (4, 4, T)

    Returns
    -------
    ndarray, shape (T, 6)
        Columns tx, ty, tz (mm), yaw, roll, pitch (degrees).
    """
    transf_w2w = np.asarray(transf_w2w, dtype=float)
    n_vols = transf_w2w.shape[-1]
    params = np.zeros((n_vols, 6))
    for t in range(n_vols):
        rotation, translation = rigid_parameters(transf_w2w[:, :, t])
        params[t, :3] = translation
        params[t, 3:] = np.degrees(rotation[::-1])
    return params
