import numpy as np
from copy import deepcopy


class Image:
    """Class that represents an immutable two-dimensional grayscale image.

    The intensities are stored as a read-only numpy-array of doubles and are addressed
    by `(row, column)`. Points in continuous image space are given as `(x, y)`, i.e.
    `x` is the column and `y` the row coordinate.
    """
    def __init__(self, data):
        """Constructor.

        Parameters
        ----------
        data
            Two-dimensional array-like (or `Image`) containing the intensities. The data
            is copied and converted to double precision.
        """
        if isinstance(data, Image):
            data = data._data

        data = np.array(data, dtype=np.double)
        assert data.ndim == 2, 'Images have to be two-dimensional'
        data.setflags(write=False)
        self._data = data

    @property
    def shape(self):
        """Shape of the image as `(height, width)`."""
        return self._data.shape

    @property
    def height(self):
        return self._data.shape[0]

    @property
    def width(self):
        return self._data.shape[1]

    @property
    def size(self):
        return self._data.size

    def to_numpy(self):
        """Returns the (read-only) numpy-array containing the intensities."""
        return self._data

    def get_norm(self, order=2, restriction=np.s_[...]):
        """Computes the norm of the intensities.

        Parameters
        ----------
        order
            Order of the norm,
            see https://numpy.org/doc/stable/reference/generated/numpy.linalg.norm.html.
        restriction
            Slice that can be used to restrict the domain on which to compute the norm.

        Returns
        -------
        The norm of the flattened intensities.
        """
        return np.linalg.norm(self._data[restriction].flatten(), ord=order)

    norm = property(get_norm)

    def copy(self):
        return deepcopy(self)

    def __deepcopy__(self, memo):
        return Image(self._data)

    def __sub__(self, other):
        if isinstance(other, Image):
            assert other.shape == self.shape
            return Image(self._data - other._data)
        return Image(self._data - other)

    def __eq__(self, other):
        return isinstance(other, Image) and other.shape == self.shape and (other._data == self._data).all()

    def __getitem__(self, index):
        return self._data[index]

    def __str__(self):
        return str(self._data)
