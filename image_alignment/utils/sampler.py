import numpy as np
from scipy.ndimage import map_coordinates

from image_alignment.core import Image


class Sampler:
    """Samples image intensities at fractional coordinates via spline interpolation.

    The sampler is only defined for points inside the image with a distance of at least
    `margin` to the border; callers have to check the bounds before sampling.
    """
    margin = 1

    def __init__(self, order=1, mode='nearest'):
        """Constructor.

        Parameters
        ----------
        order
            Order of the spline interpolation (0 is nearest neighbour, 1 is bilinear).
        mode
            Boundary mode, see
            https://docs.scipy.org/doc/scipy/reference/generated/scipy.ndimage.map_coordinates.html.
        """
        assert order in (0, 1)
        self.order = order
        self.mode = mode

    def __str__(self):
        return f"{self.__class__.__name__}(order={self.order}, mode={self.mode})"

    def sample(self, image, points):
        """Interpolates the intensities of `image` at `points`.

        Parameters
        ----------
        image
            `Image` or two-dimensional numpy-array to sample from.
        points
            Single point `(x, y)` or batch of points of shape `(N, 2)`.

        Returns
        -------
        Scalar intensity for a single point or numpy-array of shape `(N,)`.
        """
        if isinstance(image, Image):
            image = image.to_numpy()
        points = np.asarray(points, dtype=np.double)
        single = points.ndim == 1
        points = np.atleast_2d(points)

        coordinates = np.stack([points[:, 1], points[:, 0]])
        values = map_coordinates(image, coordinates, order=self.order, mode=self.mode, prefilter=False)
        return values[0] if single else values

    __call__ = sample


class BilinearSampler(Sampler):
    """Bilinear interpolation of intensities."""
    def __init__(self, mode='nearest'):
        super().__init__(order=1, mode=mode)


class NearestSampler(Sampler):
    """Nearest neighbour lookup of intensities."""
    def __init__(self, mode='nearest'):
        super().__init__(order=0, mode=mode)
