"""
brick.py

Realignment brick: rigid-body motion correction of a 4D fMRI series.
Consolidates defaulting, staging, estimation and saving into one call.
"""

import os
import logging
from pathlib import Path
from typing import Mapping

import nibabel as nib

from .modules.options import (
    RealignOptions,
    RealignOutputs,
    merge_options,
    resolve_outputs,
)
from .modules.staging import staged_volume
from .modules.estimate import estimate_realignment
from .modules.transforms import world_to_world, motion_parameters
from .modules.save_realignment import save_realignment

logger = logging.getLogger(__name__)


def realign_brick(
    in_path: str | Path,
    out: Mapping | RealignOutputs | None,
    opt: Mapping | RealignOptions | None = None,
    *,
    tmp_dir: str | Path | None = None,
) -> tuple[str | Path, RealignOutputs, RealignOptions]:
    """
    Realign the volumes of a 4D fMRI series.

    Steps:
        1. Validate the input and resolve output paths and options
        2. Return early in test mode
        3. Stage the series into a temporary file
        4. Estimate per-volume voxel-to-world matrices
        5. Derive world-to-world matrices and motion parameters
        6. Save outputs

    Parameters
    ----------
    in_path : str or Path
        4D NIfTI file (.nii or .nii.gz).
    out : Mapping, RealignOutputs or None
        Output files, keyed by ``params``, ``transf_w2w`` and ``transf_v2w``.
        Missing keys default to ``<input dir>/<input base><suffix>``; ``None``
        or ``"skip"`` disables an output.
    opt : Mapping, RealignOptions or None, optional
        Realignment options merged over the defaults (quality 0.9, fwhm 5,
        sep 4, rtm True, wrap (0, 0, 0), interp 2, method "first",
        flag_test False).
    tmp_dir : str, Path or None, optional
        Directory for the staged copy of the series.

    Returns
    -------
    in_path : str or Path
        The input path, unchanged.
    outputs : RealignOutputs
        Resolved output paths.
    options : RealignOptions
        Resolved options.

    Raises
    ------
    TypeError
        If ``in_path`` is not a path.
    ValueError
        If ``out`` or ``opt`` carry unknown fields or invalid values.
    """
    # -------------------------------------------------------------------------
    # Step 1: Validate and default
    # -------------------------------------------------------------------------
    if not isinstance(in_path, (str, os.PathLike)):
        raise TypeError(f"in_path should be a path string, got {type(in_path)}")

    outputs = resolve_outputs(in_path, out)
    options = merge_options(opt)

    # -------------------------------------------------------------------------
    # Step 2: Test mode
    # -------------------------------------------------------------------------
    if options.flag_test:
        logger.debug("Test mode: defaults resolved, nothing run")
        return in_path, outputs, options

    # -------------------------------------------------------------------------
    # Step 3-4: Stage and estimate
    # -------------------------------------------------------------------------
    img = nib.load(str(in_path))
    if len(img.shape) != 4:
        raise ValueError(f"Expected a 4D volume, got shape {img.shape}")
    affine = img.affine
    logger.info(f"Loaded {in_path} with shape {img.shape}")

    with staged_volume(img, tmp_dir=tmp_dir) as staged_path:
        transf_v2w = estimate_realignment(staged_path, **options.estimator_flags())

    # -------------------------------------------------------------------------
    # Step 5: Derive transforms and motion parameters
    # -------------------------------------------------------------------------
    transf_w2w = world_to_world(transf_v2w, affine)
    params = motion_parameters(transf_w2w)

    # -------------------------------------------------------------------------
    # Step 6: Save outputs
    # -------------------------------------------------------------------------
    save_realignment(outputs, params, transf_w2w, transf_v2w)
    logger.info(f"✓ Realignment complete: {in_path}")

    return in_path, outputs, options
