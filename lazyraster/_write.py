""">>> help(write)"""

import os
import logging

import numpy as np

from lazyraster._env import env
from lazyraster._raster import Raster
from lazyraster._raster_stack import RasterStack
from lazyraster._a_resource import AResource
from lazyraster._lazy_array import LazyArray
from lazyraster._structure import flatten
from lazyraster._backend_registry import backend_registry
from lazyraster._open import with_open
from lazyraster import _tools

LOGGER = logging.getLogger(__name__)

def write(path, value, suffix=None):
    """Write a Raster or a RasterStack to `path`, choosing the backend from the extension.

    A RasterStack is written to a single file when the backend supports multi-layer files
    (like `.zarr`), otherwise each layer is written to its own file, named by inserting a suffix
    before the extension of `path`.

    Parameters
    ----------
    path: str or path-like
    value: Raster or RasterStack
    suffix: None or sequence of str
        Only used when a RasterStack is written to separate files. One suffix per layer,
        defaults to `lazyraster.env.suffix_format.format(name)` (i.e. `'_' + name`)

    Returns
    -------
    str or list of str
        The path(s) written

    Example
    -------
    >>> lr.write('dem.tif', dem)
    'dem.tif'

    >>> lr.write('out.tif', lr.RasterStack({'a': a, 'b': b}))
    ['out_a.tif', 'out_b.tif']

    >>> lr.write('out.tif', lr.RasterStack({'a': a, 'b': b}), suffix=['-1', '-2'])
    ['out-1.tif', 'out-2.tif']

    Caveat
    ------
    A file backed raster written to its own path is updated in place: the file is opened in
    write mode and its missing value and metadata are replaced by the raster's. If the raster
    is not the plain file (a concatenation with in memory data for example), its data is read
    and written over the file's, the shapes must match.

    """
    path = _tools.normalize_path(path)
    backend = backend_registry.backend_of_path(path)

    if isinstance(value, RasterStack):
        return _write_stack(backend, path, value, suffix)
    if isinstance(value, Raster):
        if suffix is not None:
            raise TypeError('`suffix` can only be used when writing a RasterStack')
        return _write_raster(backend, path, value)
    raise TypeError('Can only write a Raster or a RasterStack, not `{}`'.format(type(value)))

def _same_file(a, b):
    return os.path.normcase(os.path.abspath(a)) == os.path.normcase(os.path.abspath(b))

def _write_raster(backend, path, raster):
    source = raster.path
    if source is not None and _same_file(source, path):
        LOGGER.info('Updating `{}` in place'.format(path))
        with_open(raster, _update_in_place, mode='w')
    else:
        LOGGER.info('Writing `{}` with `{}`'.format(path, backend.tag))
        with_open(raster, lambda opened: backend.write_single(path, opened), mode='r')
    return path

def _update_in_place(raster):
    resource, = flatten(raster, AResource)
    if resource.shape != raster.shape:
        raise ValueError(
            'Cannot write a raster of shape {} in place of `{}` of shape {}, use another path'.format(
                raster.shape, resource.path, resource.shape,
            )
        )
    payload = raster.payload
    if not (isinstance(payload, LazyArray) and payload.handle is resource):
        # The data differs from the file's, it is fully read before the file is modified
        data = np.asarray(raster)
        LOGGER.debug('Rewriting the data of `{}`'.format(resource.path))
        resource.write_block(_tools.full_block(resource.shape), data)
    resource.update(raster.missing_value, raster.metadata)

def _write_stack(backend, path, stack, suffix):
    if backend.supports_composite_write:
        sources = [r.path for r in stack.values() if r.is_disk]
        if any(_same_file(source, path) for source in sources):
            if len(sources) != len(stack) or not all(_same_file(s, path) for s in sources):
                raise ValueError('Cannot overwrite `{}` while some of the layers are read from it'.format(
                    path,
                ))
            LOGGER.info('Updating the {} layers of `{}` in place'.format(len(stack), path))
            for raster in stack.values():
                with_open(raster, _update_in_place, mode='w')
        else:
            LOGGER.info('Writing {} layers to `{}` with `{}`'.format(len(stack), path, backend.tag))
            backend.write_composite(path, stack)
        return path

    # Check all parameters before creating the first file
    suffixes = _tools.normalize_suffix_parameter(suffix, stack.keys(), env.suffix_format)
    paths = [_tools.derive_path(path, sfx) for sfx in suffixes]
    LOGGER.info('Backend `{}` cannot write several layers to `{}`, writing {} files'.format(
        backend.tag, path, len(paths),
    ))
    for layer_path, raster in zip(paths, stack.values()):
        _write_raster(backend, layer_path, raster)
    return paths
