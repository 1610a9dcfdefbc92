"""Private tools

The gdal related tools (`conv`, `gdal_error_catcher`) are not imported here, they are only
imported by the gdal backend.
"""

from .helper_classes import Singleton
from .parameters import (
    normalize_mode,
    normalize_path,
    normalize_key_parameter,
    normalize_suffix_parameter,
    derive_path,
)
from .indexing import (
    full_block,
    shape_of_block,
    check_block,
    normalize_key,
    shape_of_key,
    parent_block_of_key,
)
