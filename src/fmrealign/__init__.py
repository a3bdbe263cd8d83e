"""
fmrealign: rigid-body realignment brick for fMRI time series.
"""

__version__ = "0.1.0"

from .realign import realign_brick

__all__ = [
    "__version__",
    "realign_brick",
]
