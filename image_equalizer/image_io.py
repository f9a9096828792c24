import logging
import os

import cv2
import numpy as np
import tifffile as tiff

from image_equalizer.errors import InputLoadFailure, InvalidInput

TIFF_EXTENSIONS = (".tif", ".tiff")


def bytes_scaling(img_array: np.ndarray):
    """
    Converts 16-bit or float image data to uint8, stretching its min..max range to 0..255.
    uint8 data is returned as is.
    """
    if img_array.dtype == np.uint8:
        return img_array

    cmin = float(img_array.min())
    cscale = float(img_array.max()) - cmin
    if cscale == 0:
        cscale = 1

    bytedata = (img_array.astype(np.float64) - cmin) * (255.0 / cscale)
    return (bytedata.clip(0, 255) + 0.5).astype(np.uint8)


def _read_tiff(path: str):
    try:
        img = tiff.imread(path)
    except (OSError, ValueError, tiff.TiffFileError) as err:
        raise InputLoadFailure(f"Could not read {path}: {err}") from err

    # single page stacks keep a leading axis, some writers add a trailing channel
    while img.ndim > 2 and img.shape[0] == 1:
        img = img[0]
    if img.ndim == 3 and img.shape[2] == 1:
        img = img[:, :, 0]
    if img.ndim != 2:
        raise InvalidInput(
            f"{path} holds {img.ndim}D data of shape {img.shape}, expected a single grayscale page"
        )
    if img.dtype != np.uint8:
        logging.info(f"Rescaling {img.dtype} data from {path} to 8 bit")
        img = bytes_scaling(img)
    return img


def load_grayscale_image(path: str):
    """
    Reads a single grayscale image from disk as a 2D uint8 array.

    TIFF files are read with tifffile so that 16-bit and float data can be rescaled to 8 bit.
    Any other format is decoded by opencv, converting color images to grayscale.

    Parameters:
        path (str): Path to the image file

    Returns:
        2D np.array of dtype uint8

    """
    if not os.path.isfile(path):
        raise InputLoadFailure(f"Image file does not exist: {path}")

    if path.lower().endswith(TIFF_EXTENSIONS):
        img = _read_tiff(path)
    else:
        img = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
        if img is None:
            raise InputLoadFailure(f"Could not decode image: {path}")

    if img.size == 0:
        raise InputLoadFailure(f"Image has no pixels: {path}")
    logging.info(f"Read {path} ({img.shape[1]}x{img.shape[0]})")
    return img


def save_image(path: str, img: np.ndarray):
    try:
        written = cv2.imwrite(path, img)
    except cv2.error as err:
        raise OSError(f"Could not write image to {path}: {err}") from err
    if not written:
        raise OSError(f"Could not write image to {path}")
    logging.info("Image written to file-system : " + path)
