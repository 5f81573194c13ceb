"""
Exceptions raised by the convolution filter scripts.
"""


class ConvolutionError(Exception):
    """Base class for every error this project raises on purpose."""


class InvalidParameter(ConvolutionError, ValueError):
    """Bad kernel parameter (negative radius, non-positive sigma, bad shape)."""


class DecodeFailure(ConvolutionError, OSError):
    """Source image is missing or cannot be decoded."""


class EncodeFailure(ConvolutionError, OSError):
    """Filtered image cannot be written."""
