"""
staging.py

Stage a volume into a temporary NIfTI file for the estimator.

The estimator reads from the staged copy so the original input is never
touched and may be removed or replaced while the brick runs.
"""

import os
import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path

import nibabel as nib

logger = logging.getLogger(__name__)


def temporary_path(
    prefix: str = "fmrealign_",
    suffix: str = "_realign.nii",
    tmp_dir: str | Path | None = None,
) -> Path:
    """Create an empty, uniquely named file and return its path."""
    fd, name = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=tmp_dir)
    os.close(fd)
    return Path(name)


@contextmanager
def staged_volume(
    img,
    *,
    prefix: str = "fmrealign_",
    suffix: str = "_realign.nii",
    tmp_dir: str | Path | None = None,
):
    """
    Write ``img`` to a temporary file and yield its path.

    The file is removed when the block exits, including when the block
    raises.

    Parameters
    ----------
    img : SpatialImage
        Image to stage (data and header are written as-is).
    prefix, suffix : str
        Temporary file name parts. The suffix selects the NIfTI flavour.
    tmp_dir : str, Path or None
        Directory for the staged file. Defaults to the system temp dir.

    Yields
    ------
    Path
        Path of the staged file.
    """
    path = temporary_path(prefix=prefix, suffix=suffix, tmp_dir=tmp_dir)
    try:
        nib.save(img, path)
        logger.debug(f"Staged volume: {path}")
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug(f"Removed staged volume: {path}")
