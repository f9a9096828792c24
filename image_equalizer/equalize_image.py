import logging
import os
import sys

import typer

from image_equalizer import histogram_plots as hp
from image_equalizer import image_process_helper as iph
from image_equalizer.constants import CONSTANTS
from image_equalizer.errors import InputLoadFailure
from image_equalizer.image_io import load_grayscale_image, save_image

app = typer.Typer()


@app.callback()
def configure(
    log_file: str = typer.Option(
        CONSTANTS["log_file"], help="File where the processing log is appended"
    ),
    verbose: bool = typer.Option(False, help="Log lookup table details"),
):
    """
    Histogram equalization and point transforms for 8-bit grayscale images.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.FileHandler(log_file), logging.StreamHandler()],
        force=True,
    )


def read_source(src: str):
    try:
        return load_grayscale_image(src)
    except InputLoadFailure as err:
        logging.error(str(err))
        typer.echo("Image not loaded")
        raise typer.Exit(code=-1)


@app.command()
def equalize(
    src: str = typer.Argument(..., help="Path to the grayscale source image"),
    dest: str = typer.Argument(..., help="Folder where the results will be saved"),
    plots: bool = typer.Option(
        True,
        help=" Render the histograms and the transformation function as images",
    ),
    histogram_text: bool = typer.Option(
        False,
        help=" Write both histograms as text files, one count per line",
    ),
):
    """
    Equalizes the histogram of a grayscale image.

    Parameters:
        src (str): Path to the source image
        dest (str): Existing folder for the outputs

    Returns:
        None. Writes the equalized image to dest and, optionally, the original histogram,
        the transformation function and the equalized histogram.

    """
    if not os.path.isdir(dest):
        raise ValueError(f"ERROR: Verify destination path exists:\n{dest}")

    src_img = read_source(src)

    equalized_img, hist, cdf, lut = iph.equalize_histogram(src_img)
    eq_hist = iph.compute_histogram(equalized_img)
    logging.debug(f"CDF min: {cdf[cdf > 0][0]} total: {cdf[-1]}")
    logging.debug("Lookup table: " + " ".join(str(v) for v in lut))

    hp.echo_histogram_statistics(hist, CONSTANTS["original_histogram"])
    hp.echo_histogram_statistics(eq_hist, CONSTANTS["equalized_histogram"])

    save_image(os.path.join(dest, CONSTANTS["equalized_image"]), equalized_img)

    if plots:
        hp.draw_histogram_chart(
            hist,
            os.path.join(dest, CONSTANTS["original_histogram"]),
            title="Original histogram",
        )
        hp.draw_transformation_curve(
            lut,
            os.path.join(dest, CONSTANTS["transform_function"]),
            title="Histogram equalization",
        )
        hp.draw_histogram_chart(
            eq_hist,
            os.path.join(dest, CONSTANTS["equalized_histogram"]),
            title="Equalized histogram",
        )

    if histogram_text:
        hp.write_histogram_text(
            hist, os.path.join(dest, CONSTANTS["original_histogram_text"])
        )
        hp.write_histogram_text(
            eq_hist, os.path.join(dest, CONSTANTS["equalized_histogram_text"])
        )

    typer.echo("Images written in " + dest)


def write_point_transform(src_img, lut, dest: str, plots: bool, title: str):
    if not os.path.isdir(os.path.dirname(os.path.abspath(dest))):
        raise ValueError(
            f"ERROR: Verify destination path exists:\n{os.path.dirname(dest)}"
        )

    dest_name, extension = os.path.splitext(dest)
    if not extension:
        dest = dest_name + ".png"

    out_img = iph.apply_lookup_table(src_img, lut)
    save_image(dest, out_img)

    if plots:
        hp.draw_transformation_curve(lut, dest_name + "_transform.png", title=title)
        hp.draw_histogram_chart(
            iph.compute_histogram(out_img),
            dest_name + "_hist.png",
            title=title + " histogram",
        )
    typer.echo("Image written to " + dest)


@app.command()
def log_transform(
    src: str = typer.Argument(..., help="Path to the grayscale source image"),
    dest: str = typer.Argument(..., help="Path where the result will be saved"),
    c: float = typer.Option(1.0, help=" Scale constant, must be > 0"),
    plots: bool = typer.Option(
        False, help=" Render the transformation function and the result histogram"
    ),
):
    """
    Applies output = 255 * c * log(1 + input / 255) to every pixel
    """
    lut = iph.log_transform_table(c)
    src_img = read_source(src)
    write_point_transform(src_img, lut, dest, plots, f"Log transform (c={c})")


@app.command()
def power_law(
    src: str = typer.Argument(..., help="Path to the grayscale source image"),
    dest: str = typer.Argument(..., help="Path where the result will be saved"),
    c: float = typer.Option(1.0, help=" Scale constant, must be > 0"),
    gamma: float = typer.Option(1.0, help=" Exponent, must be > 0"),
    plots: bool = typer.Option(
        False, help=" Render the transformation function and the result histogram"
    ),
):
    """
    Applies output = 255 * c * (input / 255) ** gamma to every pixel
    """
    lut = iph.power_law_table(c, gamma)
    src_img = read_source(src)
    write_point_transform(
        src_img, lut, dest, plots, f"Power law (c={c}, gamma={gamma})"
    )


def main():
    try:
        app()
    except (ValueError, OSError) as err:
        logging.error(str(err))
        logging.error("Could not enhance image.")
        sys.exit(1)


if __name__ == "__main__":
    main()
