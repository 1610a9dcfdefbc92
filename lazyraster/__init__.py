"""Welcome to lazyraster

Rasters in memory or backed by unopened files. Files are only opened when data is touched, and
`with_open` opens the single file nested in any raster for a whole session.

>>> import lazyraster as lr
>>> dem = lr.open_raster('dem.tif')
>>> with dem.open('w') as opened_dem:
...     opened_dem[0:10, 0:10] = opened_dem[10:20, 10:20]
>>> lr.write('dem.zarr', dem)
"""

__version__ = "0.1.0"

# Public classes
from lazyraster._raster import Raster, open_raster, concat
from lazyraster._raster_stack import RasterStack, open_stack
from lazyraster._dims import Dim
from lazyraster._open import with_open, opened
from lazyraster._write import write

from lazyraster._env import Env

# Errors
from lazyraster._errors import (
    LazyRasterError,
    NotFoundError,
    BackendError,
    RasterIOError,
    BoundsError,
    UnsupportedFormatError,
    MultipleResourcesError,
    ArgumentCountError,
    UseAfterCloseError,
)

# Payloads
# Public methods, but always instanciated by Raster, rarely by user.
from lazyraster._payload import APayload, MemoryArray, ArrayView, ConcatArray
from lazyraster._lazy_array import LazyArray
from lazyraster._file_handle import FileHandle

# Backends' abstract classes and registry
from lazyraster._a_backend import ABackend
from lazyraster._a_resource import AResource
from lazyraster._backend_registry import (
    BackendRegistry,
    backend_registry,
    register_backend,
    backend_of_path,
    backend_of_tag,
)

# Misc
from lazyraster._structure import AStructural, flatten, reconstruct
from lazyraster._env import env
