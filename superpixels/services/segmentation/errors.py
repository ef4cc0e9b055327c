"""
Superpixel errors.

Everything the clustering code can fail with derives from ClusteringError,
so callers (the HTTP layer, tests) can catch one type. Each subclass has a
fixed message; pass a custom one only for the general ConversionError.
"""


class ClusteringError(ValueError):
    message = "Superpixel computation failed"

    def __init__(self, message=None):
        super().__init__(message or self.message)


# -------------------------------------------------
# Input validation
# -------------------------------------------------
class InvalidImageDimension(ClusteringError):
    message = "Image dimension cannot be 0"


class ZeroSuperpixelCount(ClusteringError):
    message = "Number of superpixels cannot be 0"


class InvalidSuperpixelCount(ClusteringError):
    message = "Number of superpixels greater than or equal to pixels in image"


class ZeroGridInterval(ClusteringError):
    message = "Grid interval cannot be 0"


class InvalidGridInterval(ClusteringError):
    message = "Grid interval larger than u32"


class MismatchedBuffer(ClusteringError):
    """The input buffer length does not match width * height."""

    def __init__(self, algorithm="image"):
        self.algorithm = algorithm
        super().__init__(
            f"{algorithm.upper()} buffer length does not equal image dimensions"
        )


# -------------------------------------------------
# Numeric integrity
# -------------------------------------------------
class NanDistance(ClusteringError):
    message = "NaN encountered during SNIC"


# -------------------------------------------------
# Seeds / conversions / resources
# -------------------------------------------------
class SeedError(ClusteringError):
    message = "Could not initialize superpixel seeds"


class InvalidImageIndex(SeedError):
    message = "Invalid image index for seed initialization"


class InvalidTotalSeeds(SeedError):
    message = "Total number of seeds too large"


class PerturbConversion(SeedError):
    message = "Could not convert integer in seed perturbation"


class ConversionError(ClusteringError):
    message = "Integer conversion out of range"


class AllocationError(ClusteringError):
    message = "Could not allocate superpixel buffers"
