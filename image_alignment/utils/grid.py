import numpy as np


def coordinate_grid(shape):
    """Function for generating the coordinates of all pixels of an image.

    Parameters
    ----------
    shape
        Shape `(height, width)` of the image.

    Returns
    -------
    Numpy-array of shape `(height, width, 2)` containing at index `[row, col]` the
    point `(x, y) = (col, row)`.
    """
    assert len(shape) == 2

    rows, cols = np.meshgrid(np.arange(shape[0]), np.arange(shape[1]), indexing='ij')
    return np.stack([cols, rows], axis=-1).astype(np.double)


def interior_points(shape, rows=None, margin=1):
    """Coordinates of the pixels that keep a distance of `margin` to the image border.

    Parameters
    ----------
    shape
        Shape `(height, width)` of the image.
    rows
        If not `None`, only the pixels in these rows are returned (rows have to be
        interior rows themselves).
    margin
        Number of pixels excluded at each side of the image.

    Returns
    -------
    Numpy-array of shape `(N, 2)` with the points `(x, y)` in row-major order.
    """
    if rows is None:
        rows = np.arange(margin, shape[0] - margin)
    cols = np.arange(margin, shape[1] - margin)
    yy, xx = np.meshgrid(rows, cols, indexing='ij')
    return np.stack([xx.ravel(), yy.ravel()], axis=-1).astype(np.double)


def is_in_image(points, shape, margin=0):
    """Checks which points lie inside of an image with a given margin.

    A point `(x, y)` is inside if `margin <= x < width - margin` and
    `margin <= y < height - margin`.

    Parameters
    ----------
    points
        Batch of points of shape `(N, 2)`.
    shape
        Shape `(height, width)` of the image.
    margin
        Number of samples required between the point and the image border.

    Returns
    -------
    Boolean numpy-array of shape `(N,)`.
    """
    points = np.atleast_2d(points)
    x, y = points[:, 0], points[:, 1]
    return ((x >= margin) & (x < shape[1] - margin)
            & (y >= margin) & (y < shape[0] - margin))
