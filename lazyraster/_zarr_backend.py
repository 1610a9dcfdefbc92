"""Backend for zarr stores (`.zarr` directories)

A store is either a single array, or a group of named arrays (one per layer). The missing
value, the metadata and the dimension names are stored in the attributes of each array.
"""

import math
import shutil
import logging

import numpy as np
import zarr
from affine import Affine

from lazyraster._errors import BackendError, RasterIOError
from lazyraster._a_backend import ABackend
from lazyraster._a_resource import AResource
from lazyraster._dims import Dim
from lazyraster._open import with_open

LOGGER = logging.getLogger(__name__)

_ZARR_MODE_OF_MODE = {
    'r': 'r',
    'w': 'r+',
}

# Attributes conversions ************************************************************************ **
# Attributes are stored as json, non-finite floats and affine transforms need a conversion.
_FLOAT_OF_STR = {
    'NaN': float('nan'),
    'Infinity': float('inf'),
    '-Infinity': float('-inf'),
}

def _json_of_scalar(value):
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return 'NaN'
        return 'Infinity' if value > 0 else '-Infinity'
    return value

def _json_of_value(value):
    if isinstance(value, Affine):
        return {'affine': list(value.to_gdal())}
    if isinstance(value, np.ndarray):
        return [_json_of_scalar(v) for v in value.tolist()]
    if isinstance(value, (list, tuple)):
        return [_json_of_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _json_of_value(v) for k, v in value.items()}
    return _json_of_scalar(value)

def _value_of_json(value):
    if isinstance(value, dict):
        if set(value) == {'affine'}:
            return Affine.from_gdal(*value['affine'])
        return {k: _value_of_json(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_value_of_json(v) for v in value]
    return value

def _missing_value_of_json(value):
    if isinstance(value, str):
        return _FLOAT_OF_STR[value]
    return value

def _attributes_of_raster(raster):
    return {
        'dims': list(raster.dim_names),
        'missing_value': _json_of_scalar(raster.missing_value),
        'metadata': _json_of_value(dict(raster.metadata)),
    }

class ZarrResource(AResource):
    """Implementation of AResource using a zarr.Array"""

    def __init__(self, zarr_array, path, key, mode):
        self._arr = zarr_array
        attrs = dict(zarr_array.attrs)
        shape = tuple(zarr_array.shape)
        names = attrs.get('dims')
        if names is None or len(names) != len(shape):
            dims = None
        else:
            dims = tuple(Dim(name) for name in names)
        super(ZarrResource, self).__init__(
            path=path,
            key=key,
            mode=mode,
            shape=shape,
            dtype=zarr_array.dtype,
            missing_value=_missing_value_of_json(attrs.get('missing_value')),
            metadata=_value_of_json(attrs.get('metadata', {})),
            dims=dims,
        )

    def _read_block(self, block):
        try:
            return np.asarray(self._arr[block])
        except OSError as e:
            raise RasterIOError('Could not read `{}`: {}'.format(self.path, e)) from e

    def _write_block(self, block, array):
        try:
            self._arr[block] = array
        except OSError as e:
            raise RasterIOError('Could not write `{}`: {}'.format(self.path, e)) from e

    def _update(self, missing_value, metadata):
        attrs = dict(self._arr.attrs)
        attrs['missing_value'] = _json_of_scalar(missing_value)
        attrs['metadata'] = _json_of_value(dict(metadata))
        self._arr.attrs.put(attrs)

    def _close(self):
        self._arr = None

class ZarrBackend(ABackend):
    """Backend for zarr stores, supports writing a whole RasterStack to a single group"""

    tag = 'zarr'
    extensions = ('.zarr',)
    supports_composite_write = True

    def _open_node(self, path, mode):
        try:
            return zarr.open(store=path, mode=_ZARR_MODE_OF_MODE[mode])
        except Exception as e:
            raise BackendError('Could not open `{}` with zarr: {}'.format(path, e)) from e

    def open(self, path, key, mode):
        node = self._open_node(path, mode)
        if isinstance(node, zarr.Group):
            keys = sorted(node.array_keys())
            if key is None:
                if len(keys) != 1:
                    raise BackendError('`{}` contains {} layers {}, a `key` is required'.format(
                        path, len(keys), keys,
                    ))
                key = keys[0]
            if key not in keys:
                raise BackendError('No layer named `{}` in `{}`, available layers: {}'.format(
                    key, path, keys,
                ))
            return ZarrResource(node[key], path, key, mode)
        if key is not None:
            raise BackendError('`{}` is a single array, it has no layer named `{}`'.format(path, key))
        return ZarrResource(node, path, None, mode)

    def layer_keys(self, path):
        node = self._open_node(path, 'r')
        if isinstance(node, zarr.Group):
            return sorted(node.array_keys())
        return [None]

    def write_single(self, path, raster):
        array = np.asarray(raster)
        self._prepare_target(path, shutil.rmtree)
        zarr.create_array(
            store=path,
            data=array,
            attributes=_attributes_of_raster(raster),
            dimension_names=list(raster.dim_names),
        )
        LOGGER.debug('Created `{}`, shape {}'.format(path, array.shape))

    def write_composite(self, path, stack):
        self._prepare_target(path, shutil.rmtree)
        group = zarr.open_group(store=path, mode='w')

        def _create_layer(name, raster):
            group.create_array(
                name,
                data=np.asarray(raster),
                attributes=_attributes_of_raster(raster),
                dimension_names=list(raster.dim_names),
            )

        for name, raster in stack.items():
            with_open(raster, lambda opened, name=name: _create_layer(name, opened))
        LOGGER.debug('Created `{}` with layers {}'.format(path, list(stack)))
