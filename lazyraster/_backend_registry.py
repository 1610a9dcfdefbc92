""">>> help(BackendRegistry)"""

import os
import logging
import functools
import importlib
import threading

from lazyraster._errors import UnsupportedFormatError
from lazyraster._a_backend import ABackend

LOGGER = logging.getLogger(__name__)

def _import_backend(module_name, class_name):
    return getattr(importlib.import_module(module_name), class_name)()

_BUILTINS = [
    ('gdal', ('.tif', '.tiff', '.img'), 'lazyraster._gdal_backend', 'GDALBackend'),
    ('zarr', ('.zarr',), 'lazyraster._zarr_backend', 'ZarrBackend'),
]

class BackendRegistry(object):
    """Maps file extensions and tags to backends

    Backends can be registered as instances or as allocators (functions returning an instance),
    allocators are called on first lookup. The built-in backends are registered as allocators so
    that the libraries they rely on are only imported when a path of their format is used.
    """

    def __init__(self):
        self._allocator_of_tag = {}
        self._backend_of_tag = {}
        self._tag_of_extension = {}
        self._lock = threading.Lock()

    def register(self, backend, tag=None, extensions=None, override=False):
        """Register a backend

        Parameters
        ----------
        backend: ABackend or callable returning an ABackend
        tag: None or str
            Defaults to `backend.tag`, mandatory with an allocator
        extensions: None or sequence of str
            Defaults to `backend.extensions`, mandatory with an allocator
        override: bool
            Whether to replace a backend registered for the same tag or extensions
        """
        if isinstance(backend, ABackend):
            allocator = None
            tag = backend.tag if tag is None else tag
            extensions = backend.extensions if extensions is None else extensions
        elif callable(backend):
            allocator, backend = backend, None
            if tag is None or extensions is None:
                raise ValueError('`tag` and `extensions` are mandatory when registering an allocator')
        else:
            raise TypeError('`backend` should be an ABackend or a callable')
        tag = str(tag)
        extensions = [self._normalize_extension(ext) for ext in extensions]

        with self._lock:
            if not override:
                if tag in self._allocator_of_tag or tag in self._backend_of_tag:
                    raise ValueError('Tag `{}` is already bound'.format(tag))
                for ext in extensions:
                    if ext in self._tag_of_extension:
                        raise ValueError('Extension `{}` is already bound to `{}`'.format(
                            ext, self._tag_of_extension[ext],
                        ))
            self._backend_of_tag.pop(tag, None)
            self._allocator_of_tag.pop(tag, None)
            if allocator is None:
                self._backend_of_tag[tag] = backend
            else:
                self._allocator_of_tag[tag] = allocator
            for ext in extensions:
                self._tag_of_extension[ext] = tag
        LOGGER.debug('Registered backend `{}` for {}'.format(tag, extensions))

    def unregister(self, tag):
        with self._lock:
            if tag not in self._backend_of_tag and tag not in self._allocator_of_tag:
                raise UnsupportedFormatError('No backend registered under `{}`'.format(tag))
            self._backend_of_tag.pop(tag, None)
            self._allocator_of_tag.pop(tag, None)
            for ext in [k for k, v in self._tag_of_extension.items() if v == tag]:
                del self._tag_of_extension[ext]

    def tag_of_path(self, path):
        """Tag of the backend handling `path`, derived from its extension"""
        ext = self.extension_of_path(path)
        with self._lock:
            tag = self._tag_of_extension.get(ext)
        if tag is None:
            raise UnsupportedFormatError('No backend registered for extension `{}` of `{}`'.format(
                ext, path,
            ))
        return tag

    def backend_of_tag(self, tag):
        with self._lock:
            if tag in self._backend_of_tag:
                return self._backend_of_tag[tag]
            if tag not in self._allocator_of_tag:
                raise UnsupportedFormatError('No backend registered under `{}`'.format(tag))
            allocator = self._allocator_of_tag.pop(tag)
            try:
                backend = allocator()
            except Exception:
                self._allocator_of_tag[tag] = allocator
                raise
            self._backend_of_tag[tag] = backend
            return backend

    def backend_of_path(self, path):
        return self.backend_of_tag(self.tag_of_path(path))

    @property
    def tags(self):
        with self._lock:
            return sorted(set(self._backend_of_tag) | set(self._allocator_of_tag))

    @property
    def extensions(self):
        with self._lock:
            return dict(self._tag_of_extension)

    @staticmethod
    def extension_of_path(path):
        path = os.fspath(path).rstrip('/\\')
        return os.path.splitext(path)[1].lower()

    @staticmethod
    def _normalize_extension(ext):
        ext = str(ext).lower()
        if not ext.startswith('.'):
            ext = '.' + ext
        return ext

backend_registry = BackendRegistry() # pylint: disable=invalid-name

for _tag, _extensions, _module_name, _class_name in _BUILTINS:
    backend_registry.register(
        functools.partial(_import_backend, _module_name, _class_name),
        tag=_tag, extensions=_extensions,
    )

def register_backend(backend, tag=None, extensions=None, override=False):
    """Shortcut for `backend_registry.register`

    >>> help(BackendRegistry.register)
    """
    backend_registry.register(backend, tag, extensions, override)

def backend_of_path(path):
    """Shortcut for `backend_registry.backend_of_path`"""
    return backend_registry.backend_of_path(path)

def backend_of_tag(tag):
    """Shortcut for `backend_registry.backend_of_tag`"""
    return backend_registry.backend_of_tag(tag)
