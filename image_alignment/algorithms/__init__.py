from .base import AlignmentAlgorithm, StepResult
from .forward_additive import ForwardAdditive
