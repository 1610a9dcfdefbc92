""">>> help(Raster)
>>> help(open_raster)
>>> help(concat)
"""

import numpy as np

from lazyraster._errors import MultipleResourcesError
from lazyraster._structure import AStructural, flatten
from lazyraster._payload import APayload, MemoryArray, ArrayView, ConcatArray
from lazyraster._lazy_array import LazyArray
from lazyraster._file_handle import FileHandle
from lazyraster._a_resource import AResource
from lazyraster._dims import Dim, format_dims, slice_dims
from lazyraster._open import opened
from lazyraster import _tools

class Raster(AStructural):
    """An array with named dimensions, a name, metadata and a missing value marker.

    The data can be in memory or held by a LazyArray, that simply references an unopened file.
    The file is only opened when the data is read or written. Taking a `view`, concatenating or
    rebuilding a Raster do not load data from disk. `raster[...]` always returns an in memory
    Raster.

    Parameters
    ----------
    data: APayload or array-like
        array-like objects are converted to numpy arrays and wrapped in a MemoryArray
    dims: None or sequence of (str or Dim)
        Dimensions of the array, defaults to `dim_0, dim_1, ...`
    refdims: sequence of Dim
        Dimensions the array was sliced from, defaults to `()`
    name: str
    metadata: None or dict
    missing_value: None or scalar
        Value representing missing data. Setting it does not change any value in the data, it
        only states which value is treated as missing.

    Example
    -------
    >>> r = lr.Raster(np.zeros((10, 20)), dims=('y', 'x'), name='dem', missing_value=-9999)
    >>> r[0:2].shape
    (2, 20)

    >>> dem = lr.open_raster('dem.tif')
    >>> dem.is_disk, dem.view(np.s_[::2, ::2]).is_disk, dem[::2, ::2].is_disk
    (True, True, False)

    """

    _structural_fields = ('payload',)

    def __init__(self, data, dims=None, refdims=(), name='', metadata=None, missing_value=None):
        if isinstance(data, Raster):
            raise TypeError('Use `Raster.rebuild` to derive a Raster from an other one')
        if not isinstance(data, APayload):
            data = MemoryArray(np.asarray(data))
        if not isinstance(name, str):
            raise TypeError('`name` should be a string, not `{}`'.format(type(name)))
        if metadata is None:
            metadata = {}
        self._payload = data
        self._dims = format_dims(dims, data.shape)
        self._refdims = tuple(refdims)
        self._name = name
        self._metadata = metadata
        self._missing_value = missing_value

    # Fields ************************************************************************************ **
    @property
    def payload(self):
        """The array-like object holding the data: a MemoryArray, a LazyArray, or a view or a
        concatenation of those"""
        return self._payload

    @property
    def dims(self):
        """Tuple of Dim"""
        return self._dims

    @property
    def refdims(self):
        """Tuple of Dim, the dimensions this raster was sliced from"""
        return self._refdims

    @property
    def name(self):
        return self._name

    @property
    def metadata(self):
        return self._metadata

    @property
    def missing_value(self):
        """The value representing missing data, or None"""
        return self._missing_value

    # Derived properties ************************************************************************ **
    @property
    def shape(self):
        return self._payload.shape

    @property
    def dtype(self):
        return self._payload.dtype

    @property
    def ndim(self):
        return len(self.shape)

    @property
    def size(self):
        return int(np.prod(self.shape))

    @property
    def dim_names(self):
        return tuple(d.name for d in self._dims)

    @property
    def is_disk(self):
        """Whether the data of this raster is read from disk"""
        return self._payload.is_disk

    @property
    def is_mem(self):
        return not self.is_disk

    @property
    def path(self):
        """Path of the file backing this raster, or None if the raster is in memory"""
        paths = {obj.path for obj in flatten(self._payload, (FileHandle, AResource))}
        if len(paths) > 1:
            raise MultipleResourcesError('Raster backed by several files: {}'.format(
                sorted(paths),
            ))
        if not paths:
            return None
        return paths.pop()

    @property
    def crs(self):
        """Coordinate reference system of the raster in wkt format, or None"""
        return self._metadata.get('crs')

    @property
    def transform(self):
        """affine.Affine mapping the (column, row) pixel coordinates to spatial coordinates,
        or None"""
        return self._metadata.get('transform')

    @property
    def units(self):
        return self._metadata.get('units')

    # Rebuild *********************************************************************************** **
    def rebuild(self, payload=None, **kwargs):
        """Copy this raster with some fields replaced, the other fields are shared.

        Parameters
        ----------
        payload, dims, refdims, name, metadata, missing_value
            See Raster
        """
        unknown = set(kwargs) - {'dims', 'refdims', 'name', 'metadata', 'missing_value'}
        if unknown:
            raise TypeError("rebuild() got an unexpected keyword argument '{}'".format(
                unknown.pop()
            ))
        if payload is None:
            payload = self._payload
        elif not isinstance(payload, APayload):
            payload = MemoryArray(np.asarray(payload))
        if 'dims' in kwargs:
            dims = kwargs['dims']
        elif payload.shape == self.shape:
            dims = self._dims
        else:
            dims = None
        return Raster(
            payload,
            dims=dims,
            refdims=kwargs.get('refdims', self._refdims),
            name=kwargs.get('name', self._name),
            metadata=kwargs.get('metadata', self._metadata),
            missing_value=kwargs.get('missing_value', self._missing_value),
        )

    # Data access ******************************************************************************* **
    def view(self, key):
        """Lazy window on this raster, no data is read.

        The dimensions indexed with an integer are dropped and moved to `refdims`.
        """
        payload = ArrayView(self._payload, key)
        dims, refdims = slice_dims(self._dims, self._refdims, payload.key)
        return self.rebuild(payload=payload, dims=dims, refdims=refdims)

    def __getitem__(self, key):
        return self.view(key).read()

    def __setitem__(self, key, value):
        if isinstance(value, Raster):
            value = np.asarray(value)
        view = ArrayView(self._payload, key)
        view.write_block(_tools.full_block(view.shape), value)

    def read(self):
        """Read all the data and return an in memory Raster"""
        array = self._payload.read_block(_tools.full_block(self.shape))
        return self.rebuild(payload=MemoryArray(array))

    def __array__(self, dtype=None, copy=None):
        array = self._payload.read_block(_tools.full_block(self.shape))
        if dtype is not None:
            array = array.astype(dtype, copy=False)
        return array

    def __len__(self):
        if not self.shape:
            raise TypeError('len() of a 0-d raster')
        return self.shape[0]

    def __eq__(self, other):
        if not isinstance(other, Raster):
            return NotImplemented
        if self.shape != other.shape:
            return False
        return bool(np.array_equal(np.asarray(self), np.asarray(other)))

    __hash__ = None

    # Files ************************************************************************************* **
    def open(self, mode='r'):
        """Open the file nested in this raster for the duration of a with statement

        >>> with dem.open('w') as opened_dem:
        ...     opened_dem[0, 0] = 42

        >>> help(lazyraster.opened)
        """
        return opened(self, mode)

    def write(self, path=None):
        """Write this raster to `path`, or to its own file if `path` is None

        >>> help(lazyraster.write)
        """
        from lazyraster._write import write

        if path is None:
            path = self.path
            if path is None:
                raise ValueError('Cannot write an in memory raster without a `path`')
        return write(path, self)

    def __repr__(self):
        return '<Raster {!r} dims={} shape={} dtype={} {}>'.format(
            self._name, self.dim_names, self.shape, self.dtype,
            'on disk' if self.is_disk else 'in memory',
        )

class _FromFileSentry(object):
    """Sentry object used to detect parameters to read from a file"""

_FROM_FILE = _FromFileSentry()

def open_raster(path, key=None, mode='r', dims=None, refdims=(), name=None, metadata=None,
                missing_value=_FROM_FILE):
    """Create a Raster backed by the file at `path`. The file is opened once to read its
    metadata and closed, only metadata are kept in memory.

    Parameters
    ----------
    path: str or path-like
        The backend is chosen from the extension, see `lazyraster.backend_registry`
    key: None or str
        Layer to select in a multi-layer file
    mode: one of {'r', 'w'}
        Mode used when reading and writing data outside of a `with_open` session
    dims: None or sequence of (str or Dim)
        Defaults to the dimensions detected by the backend
    refdims: sequence of Dim
    name: None or str
        Defaults to `key`, or `''`
    metadata: None or dict
        Defaults to the metadata read from the file
    missing_value: scalar or None
        Defaults to the value read from the file. Set manually when you know the value is not
        specified or is incorrect.

    Returns
    -------
    Raster

    Example
    -------
    >>> dem = lr.open_raster('dem.tif')
    >>> dem.missing_value, dem.crs is None
    (-32767.0, False)

    >>> layer = lr.open_raster('stack.zarr', key='ndvi', mode='w')

    """
    lazy = LazyArray.from_path(path, key, mode)
    if dims is None:
        dims = lazy.dims
    if name is None:
        name = '' if key is None else key
    if metadata is None:
        metadata = dict(lazy.metadata)
    if missing_value is _FROM_FILE:
        missing_value = lazy.missing_value
    return Raster(lazy, dims, refdims, name, metadata, missing_value)

def concat(rasters, dim):
    """Lazy concatenation of rasters along the dimension named `dim`

    All rasters must share the same dims. The name, metadata and missing value of the first
    raster are used.

    Caveat
    ------
    Concatenating rasters backed by different files creates a raster that cannot be opened by
    `with_open`, `read` it first.
    """
    rasters = list(rasters)
    if not rasters:
        raise ValueError('Nothing to concatenate')
    first = rasters[0]
    for r in rasters[1:]:
        if r.dim_names != first.dim_names:
            raise ValueError('Cannot concatenate rasters with dims {} and {}'.format(
                first.dim_names, r.dim_names,
            ))
    if dim not in first.dim_names:
        raise ValueError('`{}` is not a dimension of {}'.format(dim, first.dim_names))
    axis = first.dim_names.index(dim)

    lookups = [r.dims[axis].lookup for r in rasters]
    if any(l is None for l in lookups):
        new_dim = Dim(dim)
    else:
        new_dim = Dim(dim, np.concatenate(lookups))
    dims = list(first.dims)
    dims[axis] = new_dim

    payload = ConcatArray([r.payload for r in rasters], axis)
    return first.rebuild(payload=payload, dims=dims)
