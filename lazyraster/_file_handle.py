import os
import logging
import contextlib

from lazyraster._errors import NotFoundError
from lazyraster._backend_registry import backend_registry
from lazyraster import _tools

LOGGER = logging.getLogger(__name__)

class FileHandle(object):
    """Deferred-open reference to a resource on disk: a path, an optional layer key, an opening
    mode and the tag of the backend that reads it.

    A FileHandle never holds an open driver object, creating one performs no I/O. Each call to
    `open` returns a new AResource that the caller must close.

    Example
    -------
    >>> handle = FileHandle('dem.tif')
    >>> with handle.acquire() as resource:
    ...     print(resource.shape)

    """

    def __init__(self, path, key=None, mode='r', backend=None):
        path = _tools.normalize_path(path)
        self._path = path
        self._key = _tools.normalize_key_parameter(key)
        self._mode = _tools.normalize_mode(mode)
        if backend is None:
            backend = backend_registry.tag_of_path(path)
        self._backend = str(backend)

    @property
    def path(self):
        return self._path

    @property
    def key(self):
        """Layer selector in a multi-layer source, or None"""
        return self._key

    @property
    def mode(self):
        """Default opening mode, one of {'r', 'w'}"""
        return self._mode

    @property
    def writable(self):
        return self._mode == 'w'

    @property
    def backend(self):
        """Tag of the backend"""
        return self._backend

    def open(self, mode=None):
        """Open the resource, the caller takes ownership of the returned AResource

        Parameters
        ----------
        mode: None or one of {'r', 'w'}
            Defaults to the mode of the handle

        Returns
        -------
        AResource
        """
        mode = self._mode if mode is None else _tools.normalize_mode(mode)
        if not os.path.exists(self._path):
            raise NotFoundError('File not found: `{}`'.format(self._path))
        backend = backend_registry.backend_of_tag(self._backend)
        LOGGER.debug('Opening `{}` (key={}, mode={}) with `{}`'.format(
            self._path, self._key, mode, self._backend,
        ))
        return backend.open(self._path, self._key, mode)

    @contextlib.contextmanager
    def acquire(self):
        """Open the resource for the duration of a with statement"""
        resource = self.open()
        try:
            yield resource
        finally:
            resource.close()

    def read_block(self, block):
        with self.acquire() as resource:
            return resource.read_block(block)

    def write_block(self, block, array):
        with self.acquire() as resource:
            resource.write_block(block, array)

    def _ident(self):
        return (self._path, self._key, self._mode, self._backend)

    def __eq__(self, other):
        if not isinstance(other, FileHandle):
            return NotImplemented
        return self._ident() == other._ident()

    def __hash__(self):
        return hash(self._ident())

    def __repr__(self):
        return 'FileHandle({!r}, key={!r}, mode={!r}, backend={!r})'.format(*self._ident())
