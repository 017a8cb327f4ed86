"""Exceptions raised by the adaptive threshold estimator."""


class ThresholdEstimationError(Exception):
    """Base class for all threshold estimation failures."""


class PreconditionViolationError(ThresholdEstimationError, ValueError):
    """Input violates a documented precondition.

    Raised for an empty region passed to statistics, a seed outside the
    volume, a volume that is not 3D, or an invalid configuration value.
    """


class DegenerateStatisticsError(ThresholdEstimationError, ArithmeticError):
    """One side of the two-sided statistics has no samples.

    The upper/lower split needs at least one value on each side of the
    region mean. When a half is empty its mean and deviation are undefined.
    """
