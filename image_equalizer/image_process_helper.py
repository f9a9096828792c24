from collections import namedtuple

import cv2
import numpy as np

from image_equalizer.errors import (
    DegenerateInput,
    InvalidInput,
    InvalidParameter,
    TableSizeMismatch,
)

# one bin per value an 8-bit sample can take
MAX_INTENSITY = np.iinfo(np.uint8).max
HIST_SIZE = MAX_INTENSITY + 1

HistogramStatistics = namedtuple(
    "HistogramStatistics",
    ["max_frequency", "max_intensity", "min_frequency", "min_intensity", "total"],
)


def check_gray_image(img: np.ndarray):
    """
    Validates that img is a non-empty, single channel, 8-bit image and returns it as a 2D array.
    A trailing channel axis of size 1 (h, w, 1) is accepted and dropped.

    """
    if not isinstance(img, np.ndarray):
        raise InvalidInput("image must be a numpy array, got " + type(img).__name__)
    if img.size == 0:
        raise InvalidInput("image is empty")
    if img.ndim == 3 and img.shape[2] == 1:
        img = img[:, :, 0]
    if img.ndim != 2:
        raise InvalidInput(
            f"image must have a single channel, got shape {img.shape}"
        )
    if img.dtype != np.uint8:
        raise InvalidInput(f"image must be 8-bit (uint8), got {img.dtype}")
    return img


def compute_histogram(img: np.ndarray):
    """
    Counts the occurrences of each intensity level in a grayscale image.

    Parameters:
        img (np.ndarray): single channel uint8 image

    Returns:
        np.ndarray of HIST_SIZE int64 counts. Entry i is the number of pixels
        with intensity i; the entries add up to the number of pixels.

    """
    img = check_gray_image(img)
    return np.bincount(img.ravel(), minlength=HIST_SIZE).astype(np.int64)


def check_histogram(hist):
    hist = np.asarray(hist)
    if hist.shape != (HIST_SIZE,):
        raise InvalidInput(
            f"histogram must have {HIST_SIZE} entries, got shape {hist.shape}"
        )
    if np.any(hist < 0):
        raise InvalidInput("histogram counts must be non-negative")
    return hist


def cumulative_distribution(hist):
    """
    Running sum of the histogram: cdf[i] = hist[0] + ... + hist[i]
    """
    hist = check_histogram(hist)
    return np.cumsum(hist)


def build_transformation_table(hist):
    """
    Builds the histogram equalization mapping from a histogram.

    The CDF is normalized against its first non-zero value (cdf_min), so the darkest
    occupied level maps to 0 and the brightest to 255:

        lut[i] = rint(255 * (cdf[i] - cdf_min) / (total - cdf_min))

    Levels below the first occupied one map to 0.

    Parameters:
        hist (array-like): HIST_SIZE non-negative counts

    Returns:
        (cdf, lut): the cumulative distribution and a HIST_SIZE uint8 lookup table.
        When a single level is occupied (constant image) the range of the CDF is zero
        and the identity table is returned, leaving the image unchanged.

    Raises:
        DegenerateInput if the histogram holds no pixels.

    """
    cdf = cumulative_distribution(hist)
    total = cdf[-1]
    if total == 0:
        raise DegenerateInput("histogram is empty, cannot normalize its CDF")

    cdf_min = cdf[np.flatnonzero(cdf)[0]]
    if total == cdf_min:
        return cdf, np.arange(HIST_SIZE, dtype=np.uint8)

    scaled = MAX_INTENSITY * (cdf - cdf_min) / float(total - cdf_min)
    scaled[cdf == 0] = 0
    lut = np.clip(np.rint(scaled), 0, MAX_INTENSITY).astype(np.uint8)
    return cdf, lut


def apply_lookup_table(img: np.ndarray, lut):
    """
    Maps every pixel through lut. The output has the shape of the input.
    """
    lut = np.asarray(lut)
    if lut.size != HIST_SIZE:
        raise TableSizeMismatch(
            f"lookup table must have {HIST_SIZE} entries, got {lut.size}"
        )
    src = check_gray_image(img)
    table = np.clip(lut.ravel(), 0, MAX_INTENSITY).astype(np.uint8)
    out = cv2.LUT(np.ascontiguousarray(src), table)
    return out.reshape(img.shape)


def equalize_histogram(img: np.ndarray):
    """
    Histogram equalization of a grayscale image.

    Returns:
        (equalized image, histogram, cdf, lut). The lut is the exact table the image was
        mapped through, so plots of the transformation function agree with the output.

    """
    hist = compute_histogram(img)
    cdf, lut = build_transformation_table(hist)
    return apply_lookup_table(img, lut), hist, cdf, lut


def _table_from_curve(values: np.ndarray):
    # values are normalized outputs in [0, c]; saturate instead of wrapping
    return np.clip(np.rint(MAX_INTENSITY * values), 0, MAX_INTENSITY).astype(np.uint8)


def log_transform_table(c: float = 1.0):
    """
    output = 255 * c * log(1 + input / 255), sampled at every intensity level
    """
    if not c > 0:
        raise InvalidParameter(f"c must be greater than zero, got {c}")
    levels = np.arange(HIST_SIZE, dtype=np.float64) / MAX_INTENSITY
    return _table_from_curve(c * np.log1p(levels))


def log_transform(img: np.ndarray, c: float = 1.0):
    return apply_lookup_table(img, log_transform_table(c))


def power_law_table(c: float = 1.0, gamma: float = 1.0):
    """
    output = 255 * c * (input / 255) ** gamma, sampled at every intensity level
    """
    if not c > 0:
        raise InvalidParameter(f"c must be greater than zero, got {c}")
    if not gamma > 0:
        raise InvalidParameter(f"gamma must be greater than zero, got {gamma}")
    levels = np.arange(HIST_SIZE, dtype=np.float64) / MAX_INTENSITY
    return _table_from_curve(c * np.power(levels, gamma))


def power_law_transform(img: np.ndarray, c: float = 1.0, gamma: float = 1.0):
    """
    Power-law (gamma) correction of a grayscale image
    """
    return apply_lookup_table(img, power_law_table(c, gamma))


def histogram_statistics(hist):
    """
    Highest and lowest bin frequencies with the first intensity where each occurs,
    plus the total pixel count.
    """
    hist = check_histogram(hist)
    max_intensity = int(np.argmax(hist))
    min_intensity = int(np.argmin(hist))
    return HistogramStatistics(
        max_frequency=int(hist[max_intensity]),
        max_intensity=max_intensity,
        min_frequency=int(hist[min_intensity]),
        min_intensity=min_intensity,
        total=int(np.sum(hist)),
    )
