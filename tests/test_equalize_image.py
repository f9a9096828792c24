import logging
import os
import sys

import cv2
import numpy as np
import pytest
from typer.testing import CliRunner

from image_equalizer import equalize_image
from image_equalizer.equalize_image import app
from image_equalizer.errors import InvalidParameter

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


@pytest.fixture
def log_args(tmp_path):
    return ["--log-file", str(tmp_path / "run.log")]


def test_equalize_writes_all_outputs(tmp_path, gradient_png, log_args):
    dest = tmp_path / "img"
    dest.mkdir()
    result = runner.invoke(
        app, log_args + ["equalize", gradient_png, str(dest), "--histogram-text"]
    )
    assert result.exit_code == 0, result.output

    for name in (
        "eq_img.png",
        "org_hist.png",
        "transform_function.png",
        "eq_hist.png",
        "org_hist.txt",
        "eq_hist.txt",
    ):
        assert (dest / name).is_file(), name

    assert "Histogram Statistics for org_hist.png:" in result.output
    assert "Histogram Statistics for eq_hist.png:" in result.output
    assert "Total pixels: 1000" in result.output

    equalized = cv2.imread(str(dest / "eq_img.png"), cv2.IMREAD_GRAYSCALE)
    assert equalized.min() == 0
    assert equalized.max() == 255
    assert (tmp_path / "run.log").is_file()


def test_equalize_without_plots(tmp_path, gradient_png, log_args):
    dest = tmp_path / "img"
    dest.mkdir()
    result = runner.invoke(
        app, log_args + ["equalize", gradient_png, str(dest), "--no-plots"]
    )
    assert result.exit_code == 0, result.output
    assert sorted(os.listdir(dest)) == ["eq_img.png"]


def test_missing_image_exits_with_minus_one(tmp_path, log_args):
    result = runner.invoke(
        app, log_args + ["equalize", str(tmp_path / "Fig308Org.tif"), str(tmp_path)]
    )
    assert result.exit_code == -1
    assert "Image not loaded" in result.output


def test_missing_destination_folder(tmp_path, gradient_png, log_args):
    result = runner.invoke(
        app, log_args + ["equalize", gradient_png, str(tmp_path / "nowhere")]
    )
    assert isinstance(result.exception, ValueError)
    assert not os.path.exists(tmp_path / "nowhere")


def test_log_transform_command(tmp_path, log_args):
    src = str(tmp_path / "white.png")
    cv2.imwrite(src, np.full((4, 4), 255, dtype=np.uint8))
    dest = tmp_path / "log_img.png"

    result = runner.invoke(
        app, log_args + ["log-transform", src, str(dest), "--c", "1", "--plots"]
    )
    assert result.exit_code == 0, result.output
    out = cv2.imread(str(dest), cv2.IMREAD_GRAYSCALE)
    assert np.all(out == 177)
    assert (tmp_path / "log_img_transform.png").is_file()
    assert (tmp_path / "log_img_hist.png").is_file()


def test_power_law_command(tmp_path, gradient_png, log_args):
    dest = tmp_path / "power_img.png"
    result = runner.invoke(
        app,
        log_args + ["power-law", gradient_png, str(dest), "--c", "1", "--gamma", "1"],
    )
    assert result.exit_code == 0, result.output
    out = cv2.imread(str(dest), cv2.IMREAD_GRAYSCALE)
    np.testing.assert_array_equal(
        out, cv2.imread(gradient_png, cv2.IMREAD_GRAYSCALE)
    )


def test_power_law_rejects_gamma(tmp_path, gradient_png, log_args):
    result = runner.invoke(
        app,
        log_args
        + ["power-law", gradient_png, str(tmp_path / "p.png"), "--gamma", "0"],
    )
    assert isinstance(result.exception, InvalidParameter)
    assert not (tmp_path / "p.png").exists()


def test_main_turns_value_errors_into_exit_code(tmp_path, gradient_png, monkeypatch):
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "equalize-image",
            "--log-file",
            str(tmp_path / "run.log"),
            "log-transform",
            gradient_png,
            str(tmp_path / "l.png"),
            "--c=-1",
        ],
    )
    with pytest.raises(SystemExit) as exit_info:
        equalize_image.main()
    assert exit_info.value.code == 1


def test_point_transform_defaults_to_png(tmp_path, gradient_png, log_args):
    result = runner.invoke(
        app, log_args + ["log-transform", gradient_png, str(tmp_path / "out")]
    )
    assert result.exit_code == 0, result.output
    assert cv2.imread(str(tmp_path / "out.png"), cv2.IMREAD_GRAYSCALE) is not None


def test_point_transform_unknown_extension(tmp_path, gradient_png, log_args):
    result = runner.invoke(
        app, log_args + ["log-transform", gradient_png, str(tmp_path / "out.xyz")]
    )
    assert isinstance(result.exception, OSError)


def test_main_reports_write_failures(tmp_path, gradient_png, monkeypatch):
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "equalize-image",
            "--log-file",
            str(tmp_path / "run.log"),
            "power-law",
            gradient_png,
            str(tmp_path / "out.xyz"),
        ],
    )
    with pytest.raises(SystemExit) as exit_info:
        equalize_image.main()
    assert exit_info.value.code == 1
