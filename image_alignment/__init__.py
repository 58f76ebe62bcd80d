from .version import __version__

from .core import Image, Translation, Euclidean, Similarity, Affine, Homography
from .algorithms import AlignmentAlgorithm, ForwardAdditive, StepResult
from .exceptions import (AlignmentError, AlignmentDegenerateError, AlignmentNoDataError,
                         InvalidInputDimensionsError, AlignmentNotPreparedError)
