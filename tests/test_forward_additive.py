import numpy as np
import pytest

from image_alignment import (ForwardAdditive, Image, Translation, Euclidean, Similarity, Affine, Homography,
                             AlignmentDegenerateError, AlignmentNoDataError,
                             InvalidInputDimensionsError, AlignmentNotPreparedError)
from image_alignment.utils.create_example_images import make_gaussian_blobs


def _textured_image(shape, seed=0):
    return Image(np.random.default_rng(seed).random(shape))


def _blob_pair(offset, shape=(64, 64)):
    centers = [(28., 30.), (40., 36.), (22., 42.)]
    sigmas = [7., 5., 4.]
    weights = [1., 0.6, 0.4]
    template = make_gaussian_blobs(shape, centers, sigmas, weights)
    target = make_gaussian_blobs(shape, centers, sigmas, weights, offset=offset)
    return template, target


@pytest.mark.parametrize("warp_type", [Translation, Euclidean, Similarity, Affine, Homography])
def test_identity_warp_on_identical_images(warp_type):
    shape = (20, 30)
    image = _textured_image(shape)
    fa = ForwardAdditive(image, image)
    warp = warp_type()
    fa.prepare(warp)
    result = fa.step(warp)

    assert result.sum_squared_error == 0.
    assert result.mean_squared_error == 0.
    assert np.allclose(result.delta, 0.)
    assert result.valid_pixel_count == (shape[0] - 2) * (shape[1] - 2)
    assert np.allclose(warp.parameters, 0.)


def test_border_pixels_do_not_contribute():
    shape = (12, 17)
    target = _textured_image(shape).to_numpy()
    template = target.copy()
    template[0, :] = template[-1, :] = 1e3
    template[:, 0] = template[:, -1] = -1e3

    fa = ForwardAdditive(template, target)
    warp = Translation()
    fa.prepare(warp)
    result = fa.step(warp)

    assert result.sum_squared_error == 0.
    assert result.valid_pixel_count == (shape[0] - 2) * (shape[1] - 2)


def test_valid_pixel_count_is_bounded():
    template, target = _blob_pair((0.3, -0.2), shape=(32, 40))
    fa = ForwardAdditive(template, target)
    warp = Translation([2.5, 1.5])
    fa.prepare(warp)
    result = fa.step(warp)

    assert 0 < result.valid_pixel_count < (32 - 2) * (40 - 2)


def test_out_of_bounds_warp():
    image = _textured_image((16, 16))
    fa = ForwardAdditive(image, image)
    warp = Translation([1000., 1000.])
    fa.prepare(warp)

    with pytest.raises(AlignmentNoDataError):
        fa.step(warp)
    assert np.allclose(warp.parameters, [1000., 1000.])


def test_textureless_template_is_degenerate():
    image = Image(np.ones((16, 16)))
    fa = ForwardAdditive(image, image)
    warp = Translation()
    fa.prepare(warp)

    with pytest.raises(AlignmentDegenerateError) as e:
        fa.step(warp)
    assert not np.isfinite(e.value.condition_number) or e.value.condition_number > fa.condition_threshold
    assert np.allclose(warp.parameters, 0.)


def test_one_dimensional_texture_is_degenerate():
    columns = np.sin(np.arange(24) / 3.)
    image = Image(np.tile(columns, (20, 1)))
    fa = ForwardAdditive(image, image)
    warp = Affine()
    fa.prepare(warp)

    with pytest.raises(AlignmentDegenerateError):
        fa.step(warp)


@pytest.mark.parametrize("shape", [(2, 10), (10, 2), (1, 1)])
def test_invalid_input_dimensions(shape):
    with pytest.raises(InvalidInputDimensionsError):
        ForwardAdditive(np.zeros(shape), np.zeros((10, 10)))
    with pytest.raises(ValueError):
        ForwardAdditive(np.zeros((10, 10)), np.zeros(shape))


def test_step_requires_prepare():
    image = _textured_image((10, 10))
    fa = ForwardAdditive(image, image)
    assert not fa.is_prepared

    with pytest.raises(AlignmentNotPreparedError):
        fa.step(Translation())

    fa.prepare(Translation())
    assert fa.is_prepared


def test_accumulators_are_reset():
    template, target = _blob_pair((0.3, -0.2))
    fa = ForwardAdditive(template, target)
    warp = Translation()
    fa.prepare(warp)

    initial = fa.step(warp)
    for _ in range(10):
        fa.step(warp)

    first = fa.step(warp)
    second = fa.step(warp)
    assert first.sum_squared_error < 0.1 * initial.sum_squared_error
    assert np.isclose(second.sum_squared_error, first.sum_squared_error, rtol=1e-3)
    assert second.sum_squared_error <= first.sum_squared_error + 1e-6 * initial.sum_squared_error
    assert second.valid_pixel_count == first.valid_pixel_count
    assert np.linalg.norm(second.delta) < 1e-3


@pytest.mark.parametrize("num_workers,num_blocks", [(2, None), (4, 7), (3, 64)])
def test_parallel_and_sequential_accumulation_agree(num_workers, num_blocks):
    template, target = _blob_pair((0.4, 0.3))
    parameters = np.array([0.01, -0.02, 0.005, 0.01, 0.2, 0.1])

    sequential = ForwardAdditive(template, target)
    parallel = ForwardAdditive(template, target, num_workers=num_workers, num_blocks=num_blocks)

    warp_sequential = Affine(parameters)
    warp_parallel = Affine(parameters)
    sequential.prepare(warp_sequential)
    parallel.prepare(warp_parallel)

    result_sequential = sequential.step(warp_sequential)
    result_parallel = parallel.step(warp_parallel)

    assert result_sequential.valid_pixel_count == result_parallel.valid_pixel_count
    assert np.isclose(result_sequential.sum_squared_error, result_parallel.sum_squared_error, rtol=1e-10)
    assert (np.linalg.norm(result_sequential.delta - result_parallel.delta)
            <= 1e-6 * np.linalg.norm(result_sequential.delta))
    assert np.allclose(warp_sequential.parameters, warp_parallel.parameters)


def test_sign_of_increment():
    template, target = _blob_pair((0.5, 0.))
    fa = ForwardAdditive(template, target)
    warp = Translation()
    fa.prepare(warp)
    result = fa.step(warp)

    assert result.delta[0] > 0.
    assert np.allclose(warp.parameters, result.delta)


def test_warped_target():
    template, target = _blob_pair((0.3, -0.2))
    fa = ForwardAdditive(template, target)
    warp = Translation()
    fa.prepare(warp)
    for _ in range(10):
        fa.step(warp)

    registered = fa.warped_target(warp)
    assert registered.shape == template.shape
    restriction = np.s_[2:-2, 2:-2]
    assert (template - registered).get_norm(restriction=restriction) < 2e-2 * template.get_norm(restriction=restriction)
