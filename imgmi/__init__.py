from ._version import __version__
from .metrics import (
    DEFAULT_BITDEPTH,
    MAX_BITDEPTH,
    SINGULARITY_THRESHOLD,
    InvalidInputError,
    InvalidParameterError,
    InvalidShapeError,
    InvalidValueError,
    MutualInformationEstimator,
    entropy,
    joint_distribution,
    marginal_distribution,
    mutual_information,
    quantize,
    validate,
)
