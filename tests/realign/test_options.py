import pytest
from pathlib import Path

from fmrealign.realign.modules.options import (
    DEFAULT,
    DEFAULT_OPTIONS,
    SKIP,
    RealignOptions,
    RealignOutputs,
    merge_options,
    resolve_outputs,
    split_nifti_name,
)


class TestMergeOptions:
    def test_defaults_when_empty(self):
        for opt in (None, {}):
            options = merge_options(opt)
            assert options.quality == 0.9
            assert options.fwhm == 5
            assert options.sep == 4
            assert options.rtm is True
            assert options.wrap == (0, 0, 0)
            assert options.interp == 2
            assert options.method == "first"
            assert options.flag_test is False

    def test_default_options_constant(self):
        assert merge_options() == DEFAULT_OPTIONS

    def test_user_values_override_defaults(self):
        options = merge_options({"fwhm": 8, "rtm": False, "wrap": [0, 1, 0]})
        assert options.fwhm == 8.0
        assert options.rtm is False
        assert options.wrap == (0, 1, 0)
        # Untouched fields keep their default
        assert options.quality == 0.9
        assert options.interp == 2

    def test_accepts_options_instance(self):
        original = RealignOptions(interp=4, method="median")
        assert merge_options(original) == original

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="Unknown option"):
            merge_options({"fwhm": 5, "smoothing": 3})

    @pytest.mark.parametrize("opt", [
        {"quality": 0},
        {"quality": 1.5},
        {"fwhm": -1},
        {"sep": 0},
        {"wrap": (0, 2, 0)},
        {"wrap": (0, 0)},
        {"interp": 8},
        {"method": "mean"},
    ])
    def test_invalid_values_rejected(self, opt):
        with pytest.raises(ValueError):
            merge_options(opt)

    def test_non_mapping_rejected(self):
        with pytest.raises(TypeError):
            merge_options(["fwhm", 5])

    def test_estimator_flags_drop_test_flag(self):
        flags = merge_options({"flag_test": True}).estimator_flags()
        assert "flag_test" not in flags
        assert set(flags) == {"quality", "fwhm", "sep", "rtm", "wrap", "interp", "method"}


class TestResolveOutputs:
    def test_defaults_from_input_name(self, tmp_path):
        in_path = tmp_path / "sub01_bold.nii.gz"
        outputs = resolve_outputs(in_path, None)
        assert outputs.params == tmp_path / "sub01_bold_motion_params.txt"
        assert outputs.transf_w2w == tmp_path / "sub01_bold_transf_w2w.mat"
        assert outputs.transf_v2w == tmp_path / "sub01_bold_transf_v2w.mat"

    def test_uncompressed_extension(self):
        outputs = resolve_outputs("/data/run1.nii", {})
        assert outputs.params == Path("/data/run1_motion_params.txt")

    def test_explicit_path_kept(self, tmp_path):
        target = tmp_path / "custom" / "rp.txt"
        outputs = resolve_outputs(tmp_path / "a.nii", {"params": str(target)})
        assert outputs.params == target
        assert outputs.transf_w2w == tmp_path / "a_transf_w2w.mat"

    @pytest.mark.parametrize("marker", [SKIP, None])
    def test_skip_disables_only_that_output(self, tmp_path, marker):
        outputs = resolve_outputs(tmp_path / "a.nii", {"transf_w2w": marker})
        assert outputs.transf_w2w is None
        assert outputs.params is not None
        assert outputs.transf_v2w is not None
        assert set(outputs.enabled()) == {"params", "transf_v2w"}

    def test_default_marker(self, tmp_path):
        outputs = resolve_outputs(tmp_path / "a.nii", {"params": DEFAULT})
        assert outputs.params == tmp_path / "a_motion_params.txt"

    def test_unknown_output_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown output"):
            resolve_outputs(tmp_path / "a.nii", {"mean": "mean.nii"})

    def test_invalid_output_type(self, tmp_path):
        with pytest.raises(TypeError):
            resolve_outputs(tmp_path / "a.nii", {"params": 3})

    def test_outputs_instance_none_means_skip(self, tmp_path):
        outputs = resolve_outputs(tmp_path / "a.nii", RealignOutputs(params=tmp_path / "p.txt"))
        assert outputs.params == tmp_path / "p.txt"
        assert outputs.transf_w2w is None
        assert outputs.transf_v2w is None


def test_split_nifti_name():
    assert split_nifti_name("/x/y/scan.nii.gz") == (Path("/x/y"), "scan")
    assert split_nifti_name("scan.nii") == (Path("."), "scan")
    assert split_nifti_name("scan.img") == (Path("."), "scan")
