"""
Realignment package for fmrealign.

Exports the brick and its module functions.
"""

from .brick import realign_brick

from .modules.options import (
    DEFAULT,
    DEFAULT_OPTIONS,
    SKIP,
    RealignOptions,
    RealignOutputs,
    merge_options,
    resolve_outputs,
)
from .modules.staging import staged_volume
from .modules.estimate import estimate_realignment
from .modules.transforms import (
    rigid_matrix,
    rigid_parameters,
    world_to_world,
    motion_parameters,
)
from .modules.save_realignment import (
    save_realignment,
    load_transforms,
    load_motion_parameters,
)

from .modules.visualizations import (
    framewise_displacement,
    plot_motion_parameters,
)

__all__ = [
    # Brick
    'realign_brick',
    # Options
    'DEFAULT',
    'DEFAULT_OPTIONS',
    'SKIP',
    'RealignOptions',
    'RealignOutputs',
    'merge_options',
    'resolve_outputs',
    # Individual modules
    'staged_volume',
    'estimate_realignment',
    'rigid_matrix',
    'rigid_parameters',
    'world_to_world',
    'motion_parameters',
    'save_realignment',
    'load_transforms',
    'load_motion_parameters',
    # Visualizations
    'framewise_displacement',
    'plot_motion_parameters',
]
