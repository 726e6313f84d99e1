"""Face Collage package.

Cuts tiles from facial regions located by MediaPipe FaceMesh and redraws
them jittered and rescaled into a glitch-art collage.
"""

from . import config as config
from . import types as types
from . import utils as utils
from . import regions as regions
from . import tiles as tiles
from . import compositor as compositor
from .collage import CollageMaker, build_collage, make_rng

__all__ = [
    "config",
    "types",
    "utils",
    "regions",
    "tiles",
    "compositor",
    "CollageMaker",
    "build_collage",
    "make_rng",
]
