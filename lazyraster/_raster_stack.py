""">>> help(RasterStack)
>>> help(open_stack)
"""

import os
import collections
import collections.abc

from lazyraster._errors import NotFoundError
from lazyraster._raster import Raster, open_raster
from lazyraster._backend_registry import backend_registry
from lazyraster import _tools

class RasterStack(collections.abc.Mapping):
    """Ordered mapping of names to Rasters that share a dimension space: the rasters must agree
    on the size of the dimensions they have in common.

    Parameters
    ----------
    rasters: mapping of str to Raster, or sequence of (str, Raster), or sequence of Raster
        With a sequence of Raster, the names of the rasters are used as keys

    Example
    -------
    >>> stack = lr.RasterStack({'red': red, 'nir': nir})
    >>> stack.write('bands.zarr') # a single file with two layers
    >>> stack.write('bands.tif') # bands_red.tif, bands_nir.tif

    """

    def __init__(self, rasters):
        if isinstance(rasters, collections.abc.Mapping):
            items = list(rasters.items())
        else:
            items = [
                (elt.name, elt) if isinstance(elt, Raster) else tuple(elt)
                for elt in rasters
            ]
        layers = collections.OrderedDict()
        for name, raster in items:
            if not isinstance(name, str):
                raise TypeError('Layer names should be strings, not `{}`'.format(type(name)))
            if not isinstance(raster, Raster):
                raise TypeError('Layer `{}` should be a Raster, not `{}`'.format(
                    name, type(raster),
                ))
            if name in layers:
                raise ValueError('Layer name `{}` is used twice'.format(name))
            layers[name] = raster

        sizes = collections.OrderedDict()
        for name, raster in layers.items():
            for d, size in zip(raster.dim_names, raster.shape):
                if sizes.setdefault(d, size) != size:
                    raise ValueError(
                        'Layer `{}` has a `{}` dimension of size {} instead of {}'.format(
                            name, d, size, sizes[d],
                        )
                    )
        self._layers = layers
        self._sizes = sizes

    @property
    def dims(self):
        """Dimension sizes shared by the layers, a mapping of name to size"""
        return dict(self._sizes)

    @property
    def is_disk(self):
        return any(r.is_disk for r in self._layers.values())

    def __getitem__(self, name):
        return self._layers[name]

    def __iter__(self):
        return iter(self._layers)

    def __len__(self):
        return len(self._layers)

    def read(self):
        """Read all layers and return a RasterStack of in memory Rasters"""
        return RasterStack([
            (name, raster.read())
            for name, raster in self._layers.items()
        ])

    def write(self, path, suffix=None):
        """Write this stack to `path`

        >>> help(lazyraster.write)
        """
        from lazyraster._write import write

        return write(path, self, suffix=suffix)

    def __repr__(self):
        return '<RasterStack {} dims={}>'.format(list(self._layers), self.dims)

def open_stack(path, keys=None, mode='r'):
    """Create a RasterStack of all the layers of a multi-layer file, each layer is backed by the
    file. The file is opened once per layer to read its metadata.

    Parameters
    ----------
    path: str or path-like
    keys: None or sequence of str
        Defaults to all the layers found by the backend
    mode: one of {'r', 'w'}

    Example
    -------
    >>> stack = lr.open_stack('bands.zarr')
    >>> list(stack)
    ['nir', 'red']

    """
    path = _tools.normalize_path(path)
    if not os.path.exists(path):
        raise NotFoundError('File not found: `{}`'.format(path))
    if keys is None:
        backend = backend_registry.backend_of_path(path)
        keys = backend.layer_keys(path)
    return RasterStack([
        (key if key is not None else _stem(path), open_raster(path, key, mode))
        for key in keys
    ])

def _stem(path):
    return os.path.splitext(os.path.basename(path.rstrip('/\\')))[0]
