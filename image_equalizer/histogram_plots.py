import logging

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import mplhep as hep
import numpy as np
import typer

from image_equalizer.constants import CONSTANTS
from image_equalizer.image_process_helper import (
    HIST_SIZE,
    MAX_INTENSITY,
    check_histogram,
    histogram_statistics,
)

DEFAULT_WIDTH = CONSTANTS["chart_width"]
DEFAULT_HEIGHT = CONSTANTS["chart_height"]
DEFAULT_DPI = CONSTANTS["dpi"]


def _new_figure(width: int, height: int, dpi: int):
    return plt.subplots(figsize=(width / dpi, height / dpi), dpi=dpi)


def draw_histogram_chart(
    hist,
    path: str,
    title: str = "Histogram",
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    dpi: int = DEFAULT_DPI,
):
    """
    Renders a histogram as a bar chart and writes it to path, overwriting any existing file.

    Parameters:
        hist (array-like): HIST_SIZE bin counts
        path (str): destination image, the format follows the extension
        title (str): chart title
        width, height (int): size of the chart in pixels

    """
    hist = check_histogram(hist)
    fig, ax = _new_figure(width, height, dpi)
    hep.histplot(
        H=hist, bins=np.arange(HIST_SIZE + 1), histtype="fill", color="tab:red", ax=ax
    )
    ax.set_xlim(0, HIST_SIZE)
    ax.set_title(title)
    ax.set_xlabel("Intensity")
    ax.set_ylabel("Frequency")
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    logging.info("Histogram chart written to file-system : " + path)


def draw_transformation_curve(
    lut,
    path: str,
    title: str = "Transformation function",
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    dpi: int = DEFAULT_DPI,
):
    """
    Plots output intensity against input intensity for a lookup table
    """
    lut = np.asarray(lut)
    fig, ax = _new_figure(width, height, dpi)
    ax.plot(np.arange(lut.size), lut, color="tab:blue", linewidth=2)
    ax.plot([0, MAX_INTENSITY], [0, MAX_INTENSITY], color="gray", linestyle="--")
    ax.set_xlim(0, MAX_INTENSITY)
    ax.set_ylim(0, MAX_INTENSITY)
    ax.set_title(title)
    ax.set_xlabel("Input intensity")
    ax.set_ylabel("Output intensity")
    ax.grid(True, linestyle="--", alpha=0.3)
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    logging.info("Transformation curve written to file-system : " + path)


def write_histogram_text(hist, path: str):
    np.savetxt(path, check_histogram(hist), fmt="%u")
    logging.info("Histogram written to file-system : " + path)


def echo_histogram_statistics(hist, name: str):
    stats = histogram_statistics(hist)
    typer.echo(f"Histogram Statistics for {name}:")
    typer.echo(
        f"Max frequency: {stats.max_frequency} at intensity: {stats.max_intensity}"
    )
    typer.echo(
        f"Min frequency: {stats.min_frequency} at intensity: {stats.min_intensity}"
    )
    typer.echo(f"Total pixels: {stats.total}")
    typer.echo("")
    return stats
