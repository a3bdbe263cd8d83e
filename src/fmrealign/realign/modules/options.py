"""
options.py

Option and output-path defaulting for the realignment brick.

The option schema mirrors SPM's ``realign.estimate`` defaults (quality, fwhm,
sep, rtm, wrap, interp) plus the brick's own ``method`` and ``flag_test``
fields. Defaults are fixed here rather than looked up from a global registry.
"""

import os
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Mapping

# Marker for "write this output under its default name"
DEFAULT = "default"

# Marker for "do not write this output"
SKIP = "skip"

OUTPUT_SUFFIXES = {
    "params": "_motion_params.txt",
    "transf_w2w": "_transf_w2w.mat",
    "transf_v2w": "_transf_v2w.mat",
}

VALID_METHODS = ("first", "median")
MAX_INTERP_DEGREE = 7


@dataclass(frozen=True)
class RealignOptions:
    """Configuration of a realignment run.

    Attributes:
        quality: Quality versus speed trade-off in (0, 1]. Fraction of voxels
            sampled by the similarity metric; 1 uses every voxel.
        fwhm: FWHM (mm) of the Gaussian kernel applied before estimation.
        sep: Separation (mm) at which the images are sampled.
        rtm: Register to mean. If True, a second pass registers every volume
            to the mean of the series realigned by the first pass.
        wrap: Directions (x, y, z) in which the volume wraps around.
        interp: B-spline degree used when resampling volumes.
        method: Initial reference, "first" volume or voxelwise "median".
        flag_test: If True, only defaults are resolved and nothing is run.
    """
    quality: float = 0.9
    fwhm: float = 5.0
    sep: float = 4.0
    rtm: bool = True
    wrap: tuple[int, int, int] = (0, 0, 0)
    interp: int = 2
    method: str = "first"
    flag_test: bool = False

    def estimator_flags(self) -> dict:
        """Options forwarded to the estimator (everything but ``flag_test``)."""
        flags = asdict(self)
        flags.pop("flag_test")
        return flags


DEFAULT_OPTIONS = RealignOptions()


@dataclass(frozen=True)
class RealignOutputs:
    """Resolved output paths. ``None`` means the file is not written."""
    params: Path | None = None
    transf_w2w: Path | None = None
    transf_v2w: Path | None = None

    def enabled(self) -> dict[str, Path]:
        """Return the outputs that will be written, keyed by field name."""
        return {
            name: path for name, path in asdict(self).items()
            if path is not None
        }


def _validate_options(options: RealignOptions) -> None:
    if not 0 < options.quality <= 1:
        raise ValueError(f"quality must be in (0, 1], got {options.quality}")
    if options.fwhm < 0:
        raise ValueError(f"fwhm must be non-negative, got {options.fwhm}")
    if options.sep <= 0:
        raise ValueError(f"sep must be positive, got {options.sep}")
    if len(options.wrap) != 3 or any(w not in (0, 1) for w in options.wrap):
        raise ValueError(f"wrap must be three 0/1 flags, got {options.wrap}")
    if not 0 <= options.interp <= MAX_INTERP_DEGREE:
        raise ValueError(
            f"interp must be a B-spline degree in [0, {MAX_INTERP_DEGREE}], "
            f"got {options.interp}"
        )
    if options.method not in VALID_METHODS:
        raise ValueError(
            f"Invalid method '{options.method}'. Use one of {VALID_METHODS}"
        )


def merge_options(opt: Mapping | RealignOptions | None = None) -> RealignOptions:
    """
    Merge user-supplied options over the defaults.

    Parameters
    ----------
    opt : Mapping, RealignOptions or None
        Options to override. Missing fields take their default value.

    Returns
    -------
    RealignOptions
        Fully populated, validated options.

    Raises
    ------
    ValueError
        If ``opt`` contains an unknown field or an invalid value.
    """
    if opt is None:
        opt = {}
    elif isinstance(opt, RealignOptions):
        opt = asdict(opt)
    elif not isinstance(opt, Mapping):
        raise TypeError(f"opt must be a mapping or RealignOptions, got {type(opt)}")

    known = {f.name for f in fields(RealignOptions)}
    unknown = sorted(set(opt) - known)
    if unknown:
        raise ValueError(f"Unknown option(s): {', '.join(unknown)}")

    values = asdict(DEFAULT_OPTIONS)
    values.update(opt)
    values["quality"] = float(values["quality"])
    values["fwhm"] = float(values["fwhm"])
    values["sep"] = float(values["sep"])
    values["rtm"] = bool(values["rtm"])
    values["wrap"] = tuple(int(w) for w in values["wrap"])
    values["interp"] = int(values["interp"])
    values["flag_test"] = bool(values["flag_test"])

    options = RealignOptions(**values)
    _validate_options(options)
    return options


def split_nifti_name(path: str | Path) -> tuple[Path, str]:
    """Split a NIfTI path into (directory, basename without extension)."""
    path = Path(path)
    name = path.name
    if name.endswith(".nii.gz"):
        base = name[:-7]
    elif name.endswith(".nii"):
        base = name[:-4]
    else:
        base = path.stem
    return path.parent, base


def resolve_outputs(
    in_path: str | Path,
    out: Mapping | RealignOutputs | None = None,
) -> RealignOutputs:
    """
    Fill unset output paths from the input file name.

    A missing key or the ``DEFAULT`` marker gets
    ``<input dir>/<input base><suffix>``. An explicit ``None`` or the string
    ``"skip"`` disables the output.

    Parameters
    ----------
    in_path : str or Path
        Input 4D volume.
    out : Mapping, RealignOutputs or None
        Requested outputs, keyed by ``params``, ``transf_w2w``, ``transf_v2w``.

    Returns
    -------
    RealignOutputs
        Resolved paths, ``None`` for disabled outputs.
    """
    if out is None:
        out = {}
    elif isinstance(out, RealignOutputs):
        out = asdict(out)
    elif not isinstance(out, Mapping):
        raise TypeError(f"out must be a mapping or RealignOutputs, got {type(out)}")

    unknown = sorted(set(out) - set(OUTPUT_SUFFIXES))
    if unknown:
        raise ValueError(f"Unknown output(s): {', '.join(unknown)}")

    folder, base = split_nifti_name(in_path)
    resolved = {}
    for name, suffix in OUTPUT_SUFFIXES.items():
        value = out.get(name, DEFAULT)
        if value is None or value == SKIP:
            resolved[name] = None
        elif value == DEFAULT:
            resolved[name] = folder / f"{base}{suffix}"
        elif isinstance(value, (str, os.PathLike)):
            resolved[name] = Path(value)
        else:
            raise TypeError(f"out.{name} must be a path, None or '{SKIP}', got {type(value)}")

    return RealignOutputs(**resolved)
