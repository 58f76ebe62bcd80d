import numpy as np

from image_alignment.core import Image
from image_alignment.utils.grid import coordinate_grid


def make_circle(shape, center, radius):
    """Creates an image with a circle in it.

    Parameters
    ----------
    shape
        Shape `(height, width)` of the resulting image.
    center
        Center `(x, y)` of the circle (numpy-array; in pixels).
    radius
        Radius of the circle (in pixels).

    Returns
    -------
    The `Image`.
    """
    val = np.linalg.norm(coordinate_grid(shape) - np.asarray(center)[np.newaxis, np.newaxis, :], axis=-1)
    return Image(1. * (val < radius))


def make_square(shape, center, length):
    """Creates an image with an axis-aligned square in it.

    Parameters
    ----------
    shape
        Shape `(height, width)` of the resulting image.
    center
        Center `(x, y)` of the square (numpy-array; in pixels).
    length
        Length of each side of the square (in pixels).

    Returns
    -------
    The `Image`.
    """
    val = np.linalg.norm(coordinate_grid(shape) - np.asarray(center)[np.newaxis, np.newaxis, :],
                         axis=-1, ord=np.inf)
    return Image(1. * (val < length / 2.))


def make_gaussian_blobs(shape, centers, sigmas, weights=None, offset=(0., 0.)):
    """Creates a smooth image consisting of a sum of Gaussian blobs.

    The image is evaluated analytically, which makes it suitable for creating pairs of
    images related by an exactly known sub-pixel shift.

    Parameters
    ----------
    shape
        Shape `(height, width)` of the resulting image.
    centers
        Centers `(x, y)` of the blobs (in pixels).
    sigmas
        Standard deviations of the blobs (in pixels).
    weights
        Peak intensities of the blobs. If `None`, all blobs have peak intensity 1.
    offset
        Shift `(dx, dy)` applied to all blobs. The resulting image `I` satisfies
        `I(x + dx, y + dy) = I_0(x, y)`, where `I_0` is the image without offset.

    Returns
    -------
    The `Image`.
    """
    assert len(centers) == len(sigmas)
    if weights is None:
        weights = np.ones(len(centers))
    assert len(weights) == len(centers)

    points = coordinate_grid(shape) - np.asarray(offset, dtype=np.double)
    result = np.zeros(shape)
    for center, sigma, weight in zip(centers, sigmas, weights):
        dist_squared = np.sum((points - np.asarray(center, dtype=np.double))**2, axis=-1)
        result += weight * np.exp(-dist_squared / (2. * sigma**2))
    return Image(result)
