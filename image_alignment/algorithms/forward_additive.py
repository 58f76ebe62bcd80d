import numpy as np
import scipy.linalg
from concurrent.futures import ThreadPoolExecutor

from image_alignment.algorithms.base import AlignmentAlgorithm, StepResult
from image_alignment.exceptions import AlignmentDegenerateError, AlignmentNoDataError
from image_alignment.utils import grid


class ForwardAdditive(AlignmentAlgorithm):
    """Forward-additive image alignment.

    Aligns a template image with a target image by minimizing the sum of squared
    intensity differences between the warped target image and the template image with
    respect to the warp parameters. In every step, the Jacobian of the warp is evaluated
    at the (fixed) template coordinates, the gradient is sampled in the target at the
    warped coordinates, and the resulting Gauss-Newton increment is added to the warp
    parameters.

    The per-pixel contributions to the normal equations are accumulated over blocks of
    template rows, which can be processed by several threads.

    Based on:
    An Iterative Image Registration Technique with an Application to Stereo Vision.
    Lucas, Kanade, 1981

    Lucas-Kanade 20 Years On: A Unifying Framework.
    Baker, Matthews, 2004
    """
    def __init__(self, template, target, sampler=None, gradient_estimator=None,
                 num_workers=1, num_blocks=None, condition_threshold=1e12, log_level='INFO'):
        """Constructor.

        Parameters
        ----------
        template
            Template image as `Image` or two-dimensional array.
        target
            Target image as `Image` or two-dimensional array.
        sampler
            `Sampler` used to interpolate target intensities.
        gradient_estimator
            Estimator of target gradients at fractional coordinates.
        num_workers
            Number of threads used for accumulating the normal equations.
        num_blocks
            Number of blocks of template rows the accumulation is split into.
            If `None`, one block per worker is used.
        condition_threshold
            Largest condition number of the approximate Hessian that is accepted
            before the step is considered degenerate.
        log_level
            Verbosity of the logger.
        """
        super().__init__(template, target, sampler=sampler, gradient_estimator=gradient_estimator,
                         log_level=log_level)

        assert isinstance(num_workers, int) and num_workers > 0
        assert num_blocks is None or (isinstance(num_blocks, int) and num_blocks > 0)
        assert condition_threshold > 0

        self.num_workers = num_workers
        self.num_blocks = num_blocks or num_workers
        self.condition_threshold = condition_threshold

    def _logger_name(self):
        return 'forward_additive'

    def _prepare_impl(self, warp):
        # nothing to precompute, the target gradient is sampled at the warped positions
        pass

    def _accumulate(self, warp, rows):
        """Accumulates the normal equations over the interior template pixels in `rows`.

        Returns
        -------
        Tuple consisting of the partial Hessian, right hand side, sum of squared errors
        and number of valid pixels.
        """
        num_parameters = warp.num_parameters
        hessian = np.zeros((num_parameters, num_parameters))
        b = np.zeros(num_parameters)

        if len(rows) == 0:
            return hessian, b, 0., 0

        template_points = grid.interior_points(self.template.shape, rows=rows, margin=self.margin)
        template_intensities = self.template[rows[0]:rows[-1] + 1, self.margin:-self.margin].ravel()

        # 1. warp template pixels into the target and discard those outside
        target_points = warp.apply(template_points)
        mask = self.is_in_image(target_points, self.target.shape, self.margin)
        if not mask.any():
            return hessian, b, 0., 0
        template_points = template_points[mask]
        target_points = target_points[mask]

        # 2. error between template and target
        errors = template_intensities[mask] - self.sampler.sample(self.target, target_points)

        # 3. target gradient at the warped positions
        gradients = self.gradient_estimator.gradient(self.target, target_points)

        # 4. Jacobian at the template positions
        jacobians = warp.jacobian(template_points)

        # 5. steepest descent images
        sdi = np.einsum('ni,nij->nj', gradients, jacobians)

        # 6. right hand side and Hessian
        b += sdi.T @ errors
        hessian += sdi.T @ sdi

        return hessian, b, float(errors @ errors), int(errors.size)

    def _step_impl(self, warp):
        rows = np.arange(self.margin, self.template.height - self.margin)
        blocks = np.array_split(rows, min(self.num_blocks, len(rows)))

        if self.num_workers > 1:
            with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
                partials = list(executor.map(lambda block: self._accumulate(warp, block), blocks))
        else:
            partials = [self._accumulate(warp, block) for block in blocks]

        hessian = sum(p[0] for p in partials)
        b = sum(p[1] for p in partials)
        sum_squared_error = sum(p[2] for p in partials)
        valid_pixel_count = sum(p[3] for p in partials)

        self.logger.debug(f'Accumulated {valid_pixel_count} constraints in {len(blocks)} blocks')

        if valid_pixel_count == 0:
            raise AlignmentNoDataError('No template pixel was warped into the target image')

        delta = self._solve(hessian, b)
        return StepResult(delta, sum_squared_error, valid_pixel_count)

    def _solve(self, hessian, b):
        condition_number = np.linalg.cond(hessian)
        if not np.isfinite(condition_number) or condition_number > self.condition_threshold:
            raise AlignmentDegenerateError(f'Approximate Hessian is singular or ill-conditioned '
                                           f'(condition number {condition_number:.3e})',
                                           condition_number=condition_number)
        try:
            delta = scipy.linalg.solve(hessian, b, assume_a='sym')
        except scipy.linalg.LinAlgError as e:
            raise AlignmentDegenerateError('Solving the normal equations failed',
                                           condition_number=condition_number) from e
        if not np.all(np.isfinite(delta)):
            raise AlignmentDegenerateError('Solving the normal equations produced a non-finite increment',
                                           condition_number=condition_number)
        return delta

    def apply_step(self, warp, result):
        warp.update_additive(result.delta)
