import numpy as np

from image_alignment.core import Image
from image_alignment.utils.grid import interior_points
from image_alignment.utils.sampler import BilinearSampler, NearestSampler


def test_sampler():
    shape = (5, 10)
    image = Image(np.random.rand(*shape))
    points = interior_points(shape, margin=0)

    result = BilinearSampler().sample(image, points)
    assert np.all(result == image.to_numpy().ravel())

    result = NearestSampler().sample(image, points)
    assert np.all(result == image.to_numpy().ravel())


def test_bilinear_interpolation():
    image = Image(np.array([[0., 1.],
                            [2., 4.]]))
    sampler = BilinearSampler()

    assert np.isclose(sampler.sample(image, np.array([0.5, 0.])), 0.5)
    assert np.isclose(sampler.sample(image, np.array([0., 0.5])), 1.)
    assert np.isclose(sampler.sample(image, np.array([0.5, 0.5])), 7. / 4.)
    assert np.isclose(sampler(image, np.array([0.25, 1.])), 2.5)


def test_nearest_neighbour():
    image = Image(np.array([[0., 1.],
                            [2., 4.]]))
    sampler = NearestSampler()

    assert sampler.sample(image, np.array([0.8, 0.1])) == 1.
    assert sampler.sample(image, np.array([0.2, 0.9])) == 2.


def test_sampler_shapes():
    image = np.random.rand(6, 6)
    sampler = BilinearSampler()
    assert np.ndim(sampler.sample(image, np.array([2.5, 3.5]))) == 0
    assert sampler.sample(image, np.random.rand(7, 2) + 1.).shape == (7,)
