import time
import numpy as np

from image_alignment.core import Image
from image_alignment.exceptions import AlignmentNotPreparedError, InvalidInputDimensionsError
from image_alignment.utils import grid
from image_alignment.utils.grad import CentralDifferenceGradient
from image_alignment.utils.logger import getLogger
from image_alignment.utils.sampler import BilinearSampler
from image_alignment.utils.transformations import warp_image


class StepResult:
    """Diagnostics of a single alignment step."""
    def __init__(self, delta, sum_squared_error, valid_pixel_count):
        """Constructor.

        Parameters
        ----------
        delta
            Parameter increment computed in the step.
        sum_squared_error
            Sum of the squared intensity differences over all valid pixels (evaluated
            before the increment was applied).
        valid_pixel_count
            Number of template pixels that contributed to the step.
        """
        self.delta = delta
        self.sum_squared_error = sum_squared_error
        self.valid_pixel_count = valid_pixel_count

    @property
    def mean_squared_error(self):
        return self.sum_squared_error / self.valid_pixel_count

    def __str__(self):
        return (f"{self.__class__.__name__}:\n"
                f"\tDelta: {self.delta}\n"
                f"\tSum of squared errors: {self.sum_squared_error:.5e}\n"
                f"\tValid pixels: {self.valid_pixel_count}")


class AlignmentAlgorithm:
    """Base class for the image alignment algorithms.

    The algorithm owns the template and the target image and refines a warp that maps
    template coordinates to target coordinates. Its lifecycle is linear: `prepare` has to
    be called once with the initial warp, afterwards `step` can be called repeatedly.
    Each call of `step` mutates the given warp in place.

    A certain algorithm is specified by writing the `_prepare_impl`, `_step_impl` and
    `apply_step` methods.
    """
    def __init__(self, template, target, sampler=None, gradient_estimator=None, log_level='INFO'):
        """Constructor.

        Parameters
        ----------
        template
            Template image as `Image` or two-dimensional array.
        target
            Target image as `Image` or two-dimensional array.
        sampler
            `Sampler` used to interpolate target intensities. If `None`, a
            `BilinearSampler` is used.
        gradient_estimator
            Estimator of target gradients at fractional coordinates. If `None`, a
            `CentralDifferenceGradient` based on `sampler` is used.
        log_level
            Verbosity of the logger.
        """
        self.template = template if isinstance(template, Image) else Image(template)
        self.target = target if isinstance(target, Image) else Image(target)

        self.sampler = sampler or BilinearSampler()
        self.gradient_estimator = gradient_estimator or CentralDifferenceGradient(self.sampler)
        self.margin = max(self.sampler.margin, self.gradient_estimator.margin)

        min_size = 2 * self.margin + 1
        for name, image in [('template', self.template), ('target', self.target)]:
            if image.height < min_size or image.width < min_size:
                raise InvalidInputDimensionsError(f'The {name} image has shape {image.shape}, '
                                                  f'but at least {min_size} samples are required '
                                                  'in each dimension')

        self.is_prepared = False

        self.logger = getLogger(self._logger_name(), level=log_level)

    def _logger_name(self):
        return self.__class__.__name__.lower()

    def __str__(self):
        return (f"{self.__class__.__name__}:\n"
                f"\tTemplate shape: {self.template.shape}\n"
                f"\tTarget shape: {self.target.shape}\n"
                f"\tSampler: {self.sampler}\n"
                f"\tGradient estimator: {self.gradient_estimator}")

    @staticmethod
    def is_in_image(points, shape, margin):
        return grid.is_in_image(points, shape, margin)

    def prepare(self, warp):
        """Prepares the alignment, has to be called before the first step.

        Parameters
        ----------
        warp
            Initial warp.
        """
        self._prepare_impl(warp)
        self.is_prepared = True

    def step(self, warp):
        """Performs a single alignment step and updates the warp in place.

        Parameters
        ----------
        warp
            Current warp estimate. Will be modified to hold the updated warp.

        Returns
        -------
        The `StepResult` of the step.
        """
        if not self.is_prepared:
            raise AlignmentNotPreparedError('`prepare` has to be called before the first step')

        result = self._step_impl(warp)
        self.apply_step(warp, result)
        return result

    def _prepare_impl(self, warp):
        raise NotImplementedError

    def _step_impl(self, warp):
        raise NotImplementedError

    def apply_step(self, warp, result):
        raise NotImplementedError

    def align(self, warp, iterations=100, epsilon=1e-4):
        """Iterates alignment steps until the update becomes small.

        Parameters
        ----------
        warp
            Initial warp. Will be modified to hold the final warp.
        iterations
            Maximum number of steps to perform.
        epsilon
            The alignment stops once the norm of the parameter increment drops below
            this threshold.

        Returns
        -------
        A dictionary containing the number of performed steps, the sum and mean of the
        squared errors as well as the number of valid pixels of the last step, the final
        parameters, the reason for stopping and the elapsed time.
        """
        assert isinstance(iterations, int) and iterations > 0
        assert epsilon >= 0

        if not self.is_prepared:
            self.prepare(warp)

        start_time = time.perf_counter()
        reason_alignment_ended = 'reached maximum number of iterations'
        result = None

        with self.logger.block(f'Aligning images with {self.__class__.__name__} ...'):
            for k in range(iterations):
                result = self.step(warp)
                norm_delta = np.linalg.norm(result.delta)
                self.logger.info(f'iter: {k:3d}\tsse= {result.sum_squared_error:.5e}\t|delta|= {norm_delta:.5e}')
                if norm_delta < epsilon:
                    reason_alignment_ended = 'norm of parameter increment below threshold'
                    break

        elapsed_time = time.perf_counter() - start_time
        self.logger.info(f'Finished alignment ({reason_alignment_ended}) ...')

        return {'iterations': k + 1,
                'sum_squared_error': result.sum_squared_error,
                'mean_squared_error': result.mean_squared_error,
                'valid_pixel_count': result.valid_pixel_count,
                'parameters': warp.parameters,
                'reason_alignment_ended': reason_alignment_ended,
                'time': elapsed_time}

    def warped_target(self, warp, sampler_options={'order': 1, 'mode': 'edge'}):
        """Returns the target image resampled into the template frame through `warp`."""
        return warp_image(self.target, warp, output_shape=self.template.shape, sampler_options=sampler_options)
