class AlignmentError(Exception):
    """Base class for all errors raised during image alignment."""


class AlignmentDegenerateError(AlignmentError):
    """Raised if the system of normal equations cannot be solved reliably.

    This happens if the approximate Hessian is singular or ill-conditioned, for instance
    for a template without texture or if the warp has more parameters than the valid
    pixels constrain.
    """
    def __init__(self, message, condition_number=None):
        super().__init__(message)
        self.condition_number = condition_number


class AlignmentNoDataError(AlignmentError):
    """Raised if no template pixel was warped to a valid position in the target."""


class InvalidInputDimensionsError(AlignmentError, ValueError):
    """Raised if the template or the target image is too small to be aligned."""


class AlignmentNotPreparedError(AlignmentError, RuntimeError):
    """Raised if an alignment step is requested before `prepare` was called."""
