import numpy as np


class Warp:
    """Base class for parametric warps mapping template coordinates to target coordinates.

    A certain warp model is specified by setting `num_parameters` and writing the
    `matrix` property and the `_jacobian` method. Points are given as `(x, y)`, either as
    a single point of shape `(2,)` or as a batch of shape `(N, 2)`. All warps are the
    identity if all parameters vanish.
    """
    num_parameters = 0

    def __init__(self, parameters=None):
        """Constructor.

        Parameters
        ----------
        parameters
            Initial parameters of the warp. If `None`, the identity warp is created.
        """
        if parameters is None:
            parameters = np.zeros(self.num_parameters)
        parameters = np.array(parameters, dtype=np.double).flatten()
        assert parameters.shape == (self.num_parameters, )
        self._parameters = parameters

    def __str__(self):
        return f"{self.__class__.__name__}({', '.join(f'{p:.5e}' for p in self._parameters)})"

    @property
    def parameters(self):
        return self._parameters.copy()

    @parameters.setter
    def parameters(self, parameters):
        parameters = np.array(parameters, dtype=np.double).flatten()
        assert parameters.shape == (self.num_parameters, )
        self._parameters = parameters

    @property
    def matrix(self):
        """Homogeneous 3x3 matrix representing the warp under the current parameters."""
        raise NotImplementedError

    def apply(self, points):
        """Maps points from template space to target space.

        Parameters
        ----------
        points
            Single point of shape `(2,)` or batch of points of shape `(N, 2)`.

        Returns
        -------
        The warped point(s) with the same shape as `points`.
        """
        points, single = self._as_batch(points)
        mat = self.matrix
        warped = points @ mat[:2, :2].T + mat[:2, 2]
        denominator = points @ mat[2, :2] + mat[2, 2]
        warped = warped / denominator[:, np.newaxis]
        return warped[0] if single else warped

    __call__ = apply

    def jacobian(self, points):
        """Partial derivatives of `apply` with respect to the parameters.

        Parameters
        ----------
        points
            Single point of shape `(2,)` or batch of points of shape `(N, 2)`, given in
            template space.

        Returns
        -------
        Array of shape `(2, P)` for a single point or `(N, 2, P)` for a batch, where `P`
        is the number of parameters.
        """
        points, single = self._as_batch(points)
        jac = self._jacobian(points)
        assert jac.shape == (points.shape[0], 2, self.num_parameters)
        return jac[0] if single else jac

    def _jacobian(self, points):
        raise NotImplementedError

    def update_additive(self, delta):
        """Updates the parameters in place by adding `delta`.

        Parameters
        ----------
        delta
            Parameter increment of length `P`.
        """
        delta = np.asarray(delta, dtype=np.double).flatten()
        assert delta.shape == (self.num_parameters, )
        self._parameters = self._parameters + delta

    def copy(self):
        return type(self)(self._parameters)

    @staticmethod
    def _as_batch(points):
        points = np.asarray(points, dtype=np.double)
        single = points.ndim == 1
        points = np.atleast_2d(points)
        assert points.ndim == 2 and points.shape[1] == 2
        return points, single


class Translation(Warp):
    """Pure translation with parameters `(tx, ty)`."""
    num_parameters = 2

    @property
    def matrix(self):
        tx, ty = self._parameters
        return np.array([[1., 0., tx],
                         [0., 1., ty],
                         [0., 0., 1.]])

    def apply(self, points):
        points, single = self._as_batch(points)
        warped = points + self._parameters
        return warped[0] if single else warped

    __call__ = apply

    def _jacobian(self, points):
        return np.broadcast_to(np.eye(2), (points.shape[0], 2, 2)).copy()


class Euclidean(Warp):
    """Rigid motion with parameters `(tx, ty, theta)`, where `theta` is the rotation angle."""
    num_parameters = 3

    @property
    def matrix(self):
        tx, ty, theta = self._parameters
        c, s = np.cos(theta), np.sin(theta)
        return np.array([[c, -s, tx],
                         [s, c, ty],
                         [0., 0., 1.]])

    def _jacobian(self, points):
        theta = self._parameters[2]
        c, s = np.cos(theta), np.sin(theta)
        x, y = points[:, 0], points[:, 1]
        jac = np.zeros((points.shape[0], 2, 3))
        jac[:, 0, 0] = 1.
        jac[:, 1, 1] = 1.
        jac[:, 0, 2] = -s * x - c * y
        jac[:, 1, 2] = c * x - s * y
        return jac


class Similarity(Warp):
    """Similarity transform with parameters `(tx, ty, a, b)`.

    The warp is given as `x' = (1 + a) x - b y + tx` and `y' = b x + (1 + a) y + ty`,
    i.e. `1 + a = scale * cos(angle)` and `b = scale * sin(angle)`.
    """
    num_parameters = 4

    @property
    def matrix(self):
        tx, ty, a, b = self._parameters
        return np.array([[1. + a, -b, tx],
                         [b, 1. + a, ty],
                         [0., 0., 1.]])

    def _jacobian(self, points):
        x, y = points[:, 0], points[:, 1]
        jac = np.zeros((points.shape[0], 2, 4))
        jac[:, 0, 0] = 1.
        jac[:, 1, 1] = 1.
        jac[:, 0, 2] = x
        jac[:, 1, 2] = y
        jac[:, 0, 3] = -y
        jac[:, 1, 3] = x
        return jac


class Affine(Warp):
    """Affine warp with parameters `(p1, ..., p6)`.

    The warp is given as `x' = (1 + p1) x + p3 y + p5` and `y' = p2 x + (1 + p4) y + p6`.

    Based on:
    Lucas-Kanade 20 Years On: A Unifying Framework.
    Baker, Matthews, 2004
    """
    num_parameters = 6

    @property
    def matrix(self):
        p = self._parameters
        return np.array([[1. + p[0], p[2], p[4]],
                         [p[1], 1. + p[3], p[5]],
                         [0., 0., 1.]])

    def _jacobian(self, points):
        x, y = points[:, 0], points[:, 1]
        jac = np.zeros((points.shape[0], 2, 6))
        jac[:, 0, 0] = x
        jac[:, 1, 1] = x
        jac[:, 0, 2] = y
        jac[:, 1, 3] = y
        jac[:, 0, 4] = 1.
        jac[:, 1, 5] = 1.
        return jac


class Homography(Warp):
    """Projective warp with parameters `(p1, ..., p8)`.

    The homogeneous matrix is `I + [[p1, p2, p3], [p4, p5, p6], [p7, p8, 0]]`.
    """
    num_parameters = 8

    @property
    def matrix(self):
        return np.eye(3) + np.append(self._parameters, 0.).reshape((3, 3))

    def _jacobian(self, points):
        mat = self.matrix
        x, y = points[:, 0], points[:, 1]
        u = mat[0, 0] * x + mat[0, 1] * y + mat[0, 2]
        v = mat[1, 0] * x + mat[1, 1] * y + mat[1, 2]
        w = mat[2, 0] * x + mat[2, 1] * y + mat[2, 2]

        jac = np.zeros((points.shape[0], 2, 8))
        jac[:, 0, 0] = x / w
        jac[:, 0, 1] = y / w
        jac[:, 0, 2] = 1. / w
        jac[:, 1, 3] = x / w
        jac[:, 1, 4] = y / w
        jac[:, 1, 5] = 1. / w
        jac[:, 0, 6] = -x * u / w**2
        jac[:, 0, 7] = -y * u / w**2
        jac[:, 1, 6] = -x * v / w**2
        jac[:, 1, 7] = -y * v / w**2
        return jac
