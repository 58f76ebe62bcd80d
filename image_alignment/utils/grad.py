import numpy as np
from scipy.ndimage import correlate

from image_alignment.core import Image
from image_alignment.utils.sampler import BilinearSampler


class CentralDifferenceGradient:
    """Estimates intensity gradients at fractional coordinates using central differences.

    The neighbouring intensities are obtained from the same `Sampler` that is used to
    sample the image itself, such that the gradient is consistent with the interpolation.
    Near the border the stencil is clamped to the image and the difference quotient uses
    the shortened step. The estimator is defined for points that keep a distance of
    `margin` to the border.
    """
    def __init__(self, sampler=None):
        """Constructor.

        Parameters
        ----------
        sampler
            `Sampler` used to look up the neighbouring intensities. If `None`, a
            `BilinearSampler` is used.
        """
        self.sampler = sampler or BilinearSampler()
        self.margin = self.sampler.margin

    def __str__(self):
        return f"{self.__class__.__name__}(sampler={self.sampler})"

    def gradient(self, image, points):
        """Computes `(dI/dx, dI/dy)` of `image` at `points`.

        Parameters
        ----------
        image
            `Image` or two-dimensional numpy-array.
        points
            Single point `(x, y)` or batch of points of shape `(N, 2)`.

        Returns
        -------
        Numpy-array of shape `(2,)` for a single point or `(N, 2)` for a batch.
        """
        points = np.asarray(points, dtype=np.double)
        single = points.ndim == 1
        points = np.atleast_2d(points)

        # the stencil is clamped to the image, its actual width is used as step size
        upper_bounds = np.array([image.shape[1] - 1., image.shape[0] - 1.])
        forward = np.minimum(points[:, np.newaxis, :] + np.eye(2), upper_bounds)
        backward = np.maximum(points[:, np.newaxis, :] - np.eye(2), 0.)

        grad = np.empty_like(points)
        for d in range(2):
            width = forward[:, d, d] - backward[:, d, d]
            grad[:, d] = (self.sampler.sample(image, forward[:, d]) - self.sampler.sample(image, backward[:, d])) / width
        return grad[0] if single else grad

    __call__ = gradient


def finite_difference(image):
    """Finite difference scheme for approximating the gradient of a whole image.

    This function uses central differences (in pixel units) and replicates the
    intensities at the border.

    Parameters
    ----------
    image
        `Image` or two-dimensional numpy-array.

    Returns
    -------
    Numpy-array of shape `(height, width, 2)` containing `(dI/dx, dI/dy)` at each pixel.
    """
    if isinstance(image, Image):
        image = image.to_numpy()
    assert image.ndim == 2

    window = np.array([-1., 0., 1.]) * 0.5
    grad_x = correlate(image, window.reshape((1, 3)), mode='nearest')
    grad_y = correlate(image, window.reshape((3, 1)), mode='nearest')
    return np.stack([grad_x, grad_y], axis=-1)
