"""Unit tests for im_batch.cli.batch.config module.

Tests for option parsing and folder validation.
"""
import os
from pathlib import Path

import pytest
from im_batch.cli.batch import config as config_mod
from im_batch.cli.batch.config import (
    JobConfig,
    normalize_suffix,
    normalize_timeout,
    parse_command,
    parse_format_filter,
    validate_job_config,
)
from im_batch.utils.exceptions import ConfigError


@pytest.fixture
def input_dir(tmp_path):
    folder = tmp_path / "in"
    folder.mkdir()
    (folder / "a.jpg").write_bytes(b"a")
    return folder


class TestParseCommand:
    """Tests for command tokenization."""

    def test_simple_command(self):
        """Test a bare script name becomes one token."""
        assert parse_command("im-vintage") == ("im-vintage",)

    def test_quoted_argument_stays_whole(self):
        """Test quoted arguments with spaces are kept as one token."""
        assert parse_command('im-frame -c "rgb(255, 0, 0)" -w 5') == (
            "im-frame", "-c", "rgb(255, 0, 0)", "-w", "5",
        )

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_command(self, raw):
        """Test a missing command is a configuration error."""
        with pytest.raises(ConfigError) as exc_info:
            parse_command(raw)
        assert exc_info.value.option == "command"

    def test_command_starting_with_dash(self):
        """Test a command that looks like an option is rejected."""
        with pytest.raises(ConfigError):
            parse_command("-i foo")

    def test_unbalanced_quotes(self):
        """Test shlex errors are reported as ConfigError."""
        with pytest.raises(ConfigError):
            parse_command('im-vintage "unterminated')


class TestParseFormatFilter:
    """Tests for the format filter parser."""

    def test_comma_and_space_separated(self):
        """Test both separators are accepted."""
        assert parse_format_filter("jpg,png tif") == ("jpg", "png", "tif")

    def test_lowercased_and_deduplicated(self):
        """Test tokens are lower-cased and kept once, in order."""
        assert parse_format_filter("JPG, png, jpg") == ("jpg", "png")

    @pytest.mark.parametrize("raw", [None, "", " , "])
    def test_empty_filter(self, raw):
        """Test an empty filter means every file."""
        assert parse_format_filter(raw) == ()


class TestNormalizeSuffix:
    """Tests for suffix normalization."""

    def test_none_keeps_own_extension(self):
        assert normalize_suffix(None) is None

    def test_leading_dot_removed(self):
        assert normalize_suffix(".tiff") == "tiff"

    @pytest.mark.parametrize("raw", ["", ".", "  "])
    def test_empty_suffix_rejected(self, raw):
        """Test an empty suffix is a configuration error."""
        with pytest.raises(ConfigError):
            normalize_suffix(raw)

    def test_path_separator_rejected(self):
        """Test a suffix cannot escape the output folder."""
        with pytest.raises(ConfigError):
            normalize_suffix("png/../x")


class TestNormalizeTimeout:
    """Tests for timeout normalization."""

    @pytest.mark.parametrize("raw", [None, "", 0, "0"])
    def test_no_timeout(self, raw):
        """Test missing or zero timeout means wait forever."""
        assert normalize_timeout(raw) is None

    def test_numeric_timeout(self):
        assert normalize_timeout("2.5") == 2.5

    @pytest.mark.parametrize("raw", [-1, "abc"])
    def test_invalid_timeout(self, raw):
        with pytest.raises(ConfigError):
            normalize_timeout(raw)


class TestJobConfigFromOptions:
    """Tests for JobConfig.from_options."""

    def test_defaults(self):
        """Test unset options stay None / empty."""
        cfg = JobConfig.from_options("im-vintage")

        assert cfg.command == ("im-vintage",)
        assert cfg.input_folder is None
        assert cfg.output_folder is None
        assert cfg.formats == ()
        assert cfg.suffix is None
        assert cfg.timeout_sec is None
        assert cfg.fail_fast is False

    def test_all_options(self, tmp_path):
        """Test every option lands in its field."""
        cfg = JobConfig.from_options(
            "im-vintage -s 50",
            inputfolder=str(tmp_path),
            outputfolder=str(tmp_path / "out"),
            formats="jpg",
            suffix="png",
            path2imagemagick=str(tmp_path),
            timeout=10,
            fail_fast=True,
            dry_run=True,
        )

        assert cfg.command == ("im-vintage", "-s", "50")
        assert cfg.input_folder == tmp_path
        assert cfg.output_folder == tmp_path / "out"
        assert cfg.formats == ("jpg",)
        assert cfg.suffix == "png"
        assert cfg.imagemagick_path == tmp_path
        assert cfg.timeout_sec == 10.0
        assert cfg.fail_fast and cfg.dry_run

    def test_config_is_frozen(self):
        cfg = JobConfig.from_options("im-vintage")
        with pytest.raises(AttributeError):
            cfg.suffix = "png"  # type: ignore[misc]


class TestValidateJobConfig:
    """Tests for folder validation."""

    def test_output_defaults_to_input(self, input_dir):
        """Test the output folder defaults to the input folder."""
        cfg = validate_job_config(JobConfig(command=("x",), input_folder=input_dir))
        assert cfg.output_folder == input_dir

    def test_input_defaults_to_cwd(self, input_dir):
        """Test the input folder defaults to the working directory."""
        cfg = validate_job_config(JobConfig(command=("x",)), cwd=input_dir)
        assert cfg.input_folder == input_dir
        assert cfg.output_folder == input_dir

    def test_missing_input_folder(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            validate_job_config(JobConfig(command=("x",), input_folder=tmp_path / "nope"))
        assert exc_info.value.option == "inputfolder"

    def test_input_folder_is_a_file(self, input_dir):
        with pytest.raises(ConfigError) as exc_info:
            validate_job_config(JobConfig(command=("x",), input_folder=input_dir / "a.jpg"))
        assert "not a directory" in str(exc_info.value)

    def test_empty_input_folder_is_valid(self, tmp_path):
        """Test a folder with no entries at all passes validation."""
        cfg = validate_job_config(JobConfig(command=("x",), input_folder=tmp_path))
        assert cfg.input_folder == tmp_path

    def test_unreadable_input_folder(self, input_dir, monkeypatch):
        """Test an unreadable input folder is rejected."""
        monkeypatch.setattr(config_mod.os, "access", lambda path, mode: False)
        with pytest.raises(ConfigError) as exc_info:
            validate_job_config(JobConfig(command=("x",), input_folder=input_dir))
        assert "not readable" in str(exc_info.value)

    def test_output_folder_created(self, input_dir, tmp_path):
        """Test a missing output folder is created with its parents."""
        out = tmp_path / "deep" / "out"
        cfg = validate_job_config(JobConfig(command=("x",), input_folder=input_dir, output_folder=out))

        assert out.is_dir()
        assert cfg.output_folder == out

    def test_output_folder_is_a_file(self, input_dir):
        with pytest.raises(ConfigError) as exc_info:
            validate_job_config(
                JobConfig(command=("x",), input_folder=input_dir, output_folder=input_dir / "a.jpg")
            )
        assert exc_info.value.option == "outputfolder"

    def test_output_folder_cannot_be_created(self, input_dir):
        """Test mkdir failures become ConfigError."""
        blocked = input_dir / "a.jpg" / "sub"
        with pytest.raises(ConfigError) as exc_info:
            validate_job_config(JobConfig(command=("x",), input_folder=input_dir, output_folder=blocked))
        assert exc_info.value.option == "outputfolder"

    def test_unreadable_output_folder(self, input_dir, tmp_path, monkeypatch):
        """Test an existing but unreadable output folder is rejected."""
        out = tmp_path / "out"
        out.mkdir()
        real_access = os.access

        def fake_access(path, mode):
            if Path(path) == out:
                return False
            return real_access(path, mode)

        monkeypatch.setattr(config_mod.os, "access", fake_access)
        with pytest.raises(ConfigError) as exc_info:
            validate_job_config(JobConfig(command=("x",), input_folder=input_dir, output_folder=out))
        assert exc_info.value.option == "outputfolder"

    def test_imagemagick_path_must_exist(self, input_dir, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            validate_job_config(
                JobConfig(command=("x",), input_folder=input_dir, imagemagick_path=tmp_path / "nope")
            )
        assert exc_info.value.option == "path2imagemagick"

    def test_validation_does_not_touch_input(self, input_dir):
        """Test validation leaves the input folder listing unchanged."""
        before = sorted(os.listdir(input_dir))
        validate_job_config(JobConfig(command=("x",), input_folder=input_dir))
        assert sorted(os.listdir(input_dir)) == before
