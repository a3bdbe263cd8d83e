import pytest
import numpy as np
import nibabel as nib
from scipy import ndimage


def _blob_image(shape=(24, 24, 24)):
    """Smooth, asymmetric 3D image: a few Gaussian blobs of different sizes."""
    grid = np.indices(shape).astype(np.float32)
    centers = [(9, 11, 12, 3.5, 1.0), (15, 8, 10, 2.0, 0.7), (12, 16, 14, 2.5, 0.5)]
    image = np.zeros(shape, dtype=np.float32)
    for cx, cy, cz, width, weight in centers:
        dist2 = (grid[0] - cx) ** 2 + (grid[1] - cy) ** 2 + (grid[2] - cz) ** 2
        image += weight * np.exp(-dist2 / (2 * width ** 2))
    return image * 1000


@pytest.fixture
def synthetic_affine():
    """2 mm isotropic voxels, origin shifted away from the corner."""
    affine = np.diag([2.0, 2.0, 2.0, 1.0])
    affine[:3, 3] = [-24.0, -24.0, -24.0]
    return affine


@pytest.fixture
def synthetic_series():
    """Small 4D series (8, 8, 8, 5) of noisy cubes."""
    rng = np.random.default_rng(0)
    data = np.zeros((8, 8, 8, 5), dtype=np.float32)
    data[2:6, 2:6, 2:6, :] = 100.0
    data += rng.normal(0, 1, data.shape).astype(np.float32)
    return data


@pytest.fixture
def series_path(tmp_path, synthetic_series, synthetic_affine):
    """Synthetic series saved as NIfTI in its own directory."""
    in_dir = tmp_path / "func"
    in_dir.mkdir()
    path = in_dir / "sub01_bold.nii.gz"
    nib.save(nib.Nifti1Image(synthetic_series, synthetic_affine), path)
    return path


@pytest.fixture
def shifted_series(tmp_path, synthetic_affine):
    """
    Four volumes; volumes 2 and 3 are resampled with a 2 mm (one voxel)
    pull-back shift along x, so their correction is a +2 mm x translation.
    """
    base = _blob_image()
    shifted = ndimage.affine_transform(base, np.eye(3), offset=[1.0, 0.0, 0.0], order=3)
    data = np.stack([base, shifted, shifted, base], axis=-1).astype(np.float32)
    path = tmp_path / "shifted_bold.nii"
    nib.save(nib.Nifti1Image(data, synthetic_affine), path)
    return path
