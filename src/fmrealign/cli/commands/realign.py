import argparse
from pathlib import Path

from fmrealign.logging_setup import setup_logger


def build_outputs(args: argparse.Namespace) -> dict:
    """Output overrides from the CLI flags; unset flags keep their default."""
    out = {}
    for name in ("params", "transf_w2w", "transf_v2w"):
        value = getattr(args, name, None)
        if value is not None:
            out[name] = value
    return out


def build_options(args: argparse.Namespace) -> dict:
    """Option overrides from the CLI flags; unset flags keep their default."""
    opt = {}
    for name in ("quality", "fwhm", "sep", "interp", "method"):
        value = getattr(args, name, None)
        if value is not None:
            opt[name] = value
    if getattr(args, "wrap", None) is not None:
        opt["wrap"] = tuple(args.wrap)
    if getattr(args, "no_rtm", False):
        opt["rtm"] = False
    if getattr(args, "test", False):
        opt["flag_test"] = True
    return opt


def cmd_realign(args: argparse.Namespace) -> dict | None:
    """Run the realignment brick on the input series."""
    from fmrealign.realign import realign_brick

    setup_logger(
        log_path=getattr(args, "log_file", None),
        verbose=getattr(args, "verbose", False),
    )

    if not args.test and not Path(args.input).exists():
        print(f"Error: Input file not found: {args.input}")
        return None

    try:
        in_path, outputs, options = realign_brick(
            args.input,
            build_outputs(args),
            build_options(args),
        )
    except (FileNotFoundError, ValueError, TypeError) as e:
        print(f"Error: {e}")
        return None

    if options.flag_test:
        print("REALIGN: Test mode, nothing was run")
    else:
        print(f"REALIGN: Completed for {in_path}")

    for name, path in outputs.enabled().items():
        print(f"  {name}: {path}")

    if args.save_visualizations is not None and not options.flag_test:
        if outputs.params is None:
            print("⚠️  Motion QC requires --params; figure not saved")
        else:
            from fmrealign.realign import load_motion_parameters, plot_motion_parameters
            from fmrealign.realign.modules.options import split_nifti_name

            _, stem = split_nifti_name(in_path)
            plot_motion_parameters(
                load_motion_parameters(outputs.params),
                args.save_visualizations,
                stem,
                verbose=True,
            )

    return {
        'outputs': outputs,
        'options': options,
    }
