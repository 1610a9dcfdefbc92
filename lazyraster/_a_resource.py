import logging
import contextlib

import numpy as np

from lazyraster._errors import UseAfterCloseError, RasterIOError
from lazyraster import _tools

LOGGER = logging.getLogger(__name__)

class AResource(object):
    """Base abstract class defining the common behavior of all opened backend resources.

    A resource is obtained from `FileHandle.open` (or from `ABackend.open`) and holds a live
    driver object until `close` is called. Once closed, every operation and every cached
    property raises a `UseAfterCloseError`, only `path`, `key`, `mode` and `closed` stay
    readable and `close` is a no-op.

    Features Defined
    ----------------
    - Has cached `shape`, `dtype`, `missing_value`, `metadata` and `dims`
    - Has `path`, `key` and `mode`
    - Block-wise `read_block` and `write_block` with bounds checking
    - `update` to rewrite the missing value and the metadata of the resource
    - Can be closed, closing twice is a no-op
    - `acquire` to use the resource without closing it (see FileHandle.acquire)
    """

    def __init__(self, path, key, mode, shape, dtype, missing_value, metadata, dims):
        self._path = path
        self._key = key
        self._mode = mode
        self._shape = tuple(int(v) for v in shape)
        self._dtype = np.dtype(dtype)
        self._missing_value = missing_value
        self._metadata = metadata
        self._dims = dims
        self._closed = False

    # Properties ******************************************************************************** **
    @property
    def path(self):
        return self._path

    @property
    def key(self):
        """Name of the layer opened in a multi-layer source, or None"""
        return self._key

    @property
    def mode(self):
        """Open mode, one of {'r', 'w'}"""
        return self._mode

    @property
    def shape(self):
        self._check_open('shape')
        return self._shape

    @property
    def dtype(self):
        self._check_open('dtype')
        return self._dtype

    @property
    def missing_value(self):
        """Value representing missing data, or None"""
        self._check_open('missing_value')
        return self._missing_value

    @property
    def metadata(self):
        self._check_open('metadata')
        return self._metadata

    @property
    def dims(self):
        """Dimensions detected in the resource, a tuple of Dim"""
        self._check_open('dims')
        return self._dims

    @property
    def closed(self):
        return self._closed

    # Operations ******************************************************************************** **
    def read_block(self, block):
        """Read a contiguous block of data

        Parameters
        ----------
        block: tuple of slice

        Returns
        -------
        np.ndarray of shape `shape_of_block(block)`
        """
        self._check_open('read_block')
        block = _tools.check_block(block, self._shape)
        array = self._read_block(block)
        return np.asarray(array, self._dtype)

    def write_block(self, block, array):
        """Write a contiguous block of data, `array` is broadcasted to the shape of the block"""
        self._check_open('write_block')
        self._check_writable()
        block = _tools.check_block(block, self._shape)
        array = np.broadcast_to(np.asarray(array), _tools.shape_of_block(block))
        array = array.astype(self._dtype, copy=False)
        self._write_block(block, array)

    def update(self, missing_value, metadata):
        """Rewrite the missing value and the metadata of the resource"""
        self._check_open('update')
        self._check_writable()
        self._update(missing_value, metadata)
        self._missing_value = missing_value
        self._metadata = metadata

    def close(self):
        if self._closed:
            return
        self._closed = True
        LOGGER.debug('Closing `{}` (key={}, mode={})'.format(self._path, self._key, self._mode))
        self._close()

    @contextlib.contextmanager
    def acquire(self):
        """Use this resource without taking its ownership, it stays open on exit"""
        self._check_open('acquire')
        yield self

    def __enter__(self):
        return self

    def __exit__(self, *args, **kwargs):
        self.close()

    def __repr__(self):
        return '<{} {} key={} mode={} shape={} dtype={}{}>'.format(
            self.__class__.__name__, self._path, self._key, self._mode,
            self._shape, self._dtype, ' closed' if self._closed else '',
        )

    # Checks ************************************************************************************ **
    def _check_open(self, operation):
        if self._closed:
            raise UseAfterCloseError('Cannot `{}` on the closed resource `{}`'.format(
                operation, self._path,
            ))

    def _check_writable(self):
        if self._mode != 'w':
            raise RasterIOError('`{}` is opened in read-only mode'.format(self._path))

    # Virtual methods *************************************************************************** **
    def _read_block(self, block): # pragma: no cover
        raise NotImplementedError('AResource._read_block is virtual pure')

    def _write_block(self, block, array): # pragma: no cover
        raise NotImplementedError('AResource._write_block is virtual pure')

    def _update(self, missing_value, metadata): # pragma: no cover
        raise NotImplementedError('AResource._update is virtual pure')

    def _close(self):
        """Virtual method:
        - May be overriden
        """
        pass
