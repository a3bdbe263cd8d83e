"""
Realignment modules.

Exports the QC visualization functions.
"""

from .visualizations import (
    framewise_displacement,
    plot_motion_parameters,
)

__all__ = [
    'framewise_displacement',
    'plot_motion_parameters',
]
