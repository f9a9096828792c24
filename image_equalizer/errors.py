class EqualizerError(ValueError):
    """
    Base class for every error raised while enhancing an image
    """


class InputLoadFailure(EqualizerError):
    """
    The source image is missing, unreadable or could not be decoded
    """


class InvalidInput(EqualizerError):
    """
    The image buffer is not a non-empty single channel 8-bit array
    """


class DegenerateInput(EqualizerError):
    """
    The histogram holds no pixels, so the CDF cannot be normalized
    """


class InvalidParameter(EqualizerError):
    """
    A point transform received a non-positive c or gamma
    """


class TableSizeMismatch(EqualizerError):
    """
    A lookup table does not hold one entry per intensity level
    """
