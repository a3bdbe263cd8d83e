from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .. import __version__
from .commands.check import cmd_check
from .commands.realign import cmd_realign

def main() -> None:
    """Entrypoint for the fmrealign CLI."""
    parser = argparse.ArgumentParser(
        prog="fmrealign",
        description="Rigid-body realignment of 4D fMRI series."
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command")

    # -------------------------------------------------------------------------
    # check subtool
    # -------------------------------------------------------------------------
    p_check = subparsers.add_parser("check", help="Run environment checks")
    p_check.set_defaults(func=cmd_check)

    # -------------------------------------------------------------------------
    # realign subtool
    # -------------------------------------------------------------------------
    p_realign = subparsers.add_parser(
        "realign",
        help="Estimate rigid-body realignment of a 4D fMRI series"
    )
    p_realign.add_argument(
        "input",
        type=Path,
        help="Path to 4D NIfTI file (.nii or .nii.gz)"
    )

    # Outputs
    p_realign.add_argument(
        "--params",
        type=str,
        default=None,
        help="Motion parameter text file, or 'skip' "
             "(default: <input>_motion_params.txt)"
    )
    p_realign.add_argument(
        "--transf-w2w",
        type=str,
        default=None,
        help="World-to-world matrices (.mat), or 'skip' "
             "(default: <input>_transf_w2w.mat)"
    )
    p_realign.add_argument(
        "--transf-v2w",
        type=str,
        default=None,
        help="Voxel-to-world matrices (.mat), or 'skip' "
             "(default: <input>_transf_v2w.mat)"
    )

    # Estimation options
    p_realign.add_argument(
        "--quality",
        type=float,
        default=None,
        help="Quality versus speed trade-off in (0, 1] (default: 0.9)"
    )
    p_realign.add_argument(
        "--fwhm",
        type=float,
        default=None,
        help="FWHM of the Gaussian smoothing kernel in mm (default: 5)"
    )
    p_realign.add_argument(
        "--sep",
        type=float,
        default=None,
        help="Sampling separation in mm (default: 4)"
    )
    p_realign.add_argument(
        "--no-rtm",
        action="store_true",
        help="Disable the second pass registering to the mean image"
    )
    p_realign.add_argument(
        "--wrap",
        type=int,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=None,
        help="Wrap-around directions as three 0/1 flags (default: 0 0 0)"
    )
    p_realign.add_argument(
        "--interp",
        type=int,
        default=None,
        help="B-spline degree used for resampling (default: 2)"
    )
    p_realign.add_argument(
        "--method",
        choices=["first", "median"],
        default=None,
        help="Initial reference volume (default: first)"
    )
    p_realign.add_argument(
        "--test",
        action="store_true",
        help="Only resolve outputs and options, do not run"
    )

    # Reporting
    p_realign.add_argument(
        "--save-visualizations",
        type=Path,
        default=None,
        metavar="DIR",
        help="Save a motion QC figure under DIR/visualizations"
    )
    p_realign.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write a JSON Lines log to this file"
    )
    p_realign.add_argument(
        "--verbose",
        action="store_true",
        help="Print detailed processing information"
    )
    p_realign.set_defaults(func=cmd_realign)

    # -------------------------------------------------------------------------
    # Parse and execute
    # -------------------------------------------------------------------------
    args = parser.parse_args()

    if hasattr(args, "func"):
        result = args.func(args)
        if result is None or result is False:
            sys.exit(1)
    else:
        parser.print_help()
