import numpy as np
import pytest

from fmrealign.realign.modules.visualizations import (
    framewise_displacement,
    plot_motion_parameters,
)


@pytest.fixture
def motion_params():
    params = np.zeros((5, 6))
    params[2, 0] = 1.0          # 1 mm jump in x
    params[3, 0] = 1.0
    params[4, 5] = 1.0          # 1 degree pitch
    return params


def test_framewise_displacement(motion_params):
    fd = framewise_displacement(motion_params)
    assert fd.shape == (5,)
    assert fd[0] == 0
    assert fd[1] == 0
    assert fd[2] == pytest.approx(1.0)
    assert fd[3] == 0
    # 1 mm back in x plus 1 degree of arc on a 50 mm sphere
    assert fd[4] == pytest.approx(1.0 + np.radians(1.0) * 50)


def test_plot_motion_parameters(tmp_path, motion_params):
    fig_path = plot_motion_parameters(motion_params, tmp_path, "sub01", verbose=False)
    assert fig_path == tmp_path / "visualizations" / "sub01_motion_qc.png"
    assert fig_path.exists()
    assert fig_path.stat().st_size > 0
