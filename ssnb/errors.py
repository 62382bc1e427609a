"""
Exceptions raised by ssnb.

Numerical degeneracy (zero variance, probabilities on the 0/1 boundary) is
never an error: it is repaired where it happens.
"""


class SSNBError(Exception):
    """Base class for all ssnb errors."""


class MalformedInputError(SSNBError, ValueError):
    """A row has the wrong width or a label that is neither blank nor a valid class."""


class DimensionMismatchError(SSNBError, ValueError):
    """Array lengths disagree with the declared instance/feature/class counts."""


class ArtifactCorruptionError(SSNBError, ValueError):
    """A model file is unreadable or missing required posterior sections."""
