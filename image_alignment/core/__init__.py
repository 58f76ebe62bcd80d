from .images import Image
from .warps import Warp, Translation, Euclidean, Similarity, Affine, Homography
