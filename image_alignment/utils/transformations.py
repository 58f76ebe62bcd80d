import numpy as np
import skimage.transform

from image_alignment.core import Image
from image_alignment.utils import grid


def warp_image(image, warp, output_shape=None, sampler_options={'order': 1, 'mode': 'edge'}):
    """Resamples an image into template space through a warp.

    The pixel `(x, y)` of the result holds the intensity of `image` at `warp(x, y)`. If the
    warp is the result of an alignment of a template with `image`, the result is thus
    the target image registered to the template.

    Parameters
    ----------
    image
        `Image` (usually the target image) to resample.
    warp
        `Warp` mapping template coordinates to coordinates in `image`.
    output_shape
        Shape of the result. If `None`, the shape of `image` is used.
    sampler_options
        Additional options passed to the `warp`-function,
        see https://scikit-image.org/docs/stable/api/skimage.transform.html#skimage.transform.warp.

    Returns
    -------
    The resampled `Image`.
    """
    if not isinstance(image, Image):
        image = Image(image)
    if output_shape is None:
        output_shape = image.shape

    points = grid.coordinate_grid(output_shape).reshape((-1, 2))
    warped_points = warp.apply(points).reshape((*output_shape, 2))
    coordinates = np.stack([warped_points[..., 1], warped_points[..., 0]])

    result = skimage.transform.warp(image.to_numpy(), coordinates, preserve_range=True, **sampler_options)
    return Image(result)
