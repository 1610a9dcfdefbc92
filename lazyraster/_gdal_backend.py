"""Backend for the single-layer raster formats of gdal (GeoTIFF...)

Arrays are 2-dimensional (y, x) for single band files, and 3-dimensional (y, x, band) for
multi band files. A `key` selects the band with that description.
"""

import logging

import numpy as np
from osgeo import gdal
from affine import Affine

from lazyraster._errors import BackendError, RasterIOError
from lazyraster._a_backend import ABackend
from lazyraster._backend_registry import BackendRegistry
from lazyraster._a_resource import AResource
from lazyraster._dims import Dim
from lazyraster._env import env
from lazyraster._tools import conv
from lazyraster._tools.gdal_error_catcher import GDALErrorCatcher
from lazyraster import _tools

LOGGER = logging.getLogger(__name__)

_DRIVER_OF_EXTENSION = {
    '.tif': 'GTiff',
    '.tiff': 'GTiff',
    '.img': 'HFA',
}

class GDALResource(AResource):
    """Implementation of AResource using a gdal.Dataset"""

    def __init__(self, gdal_ds, path, key, mode):
        self._gdal_ds = gdal_ds

        band_ids = self._band_ids_of_key(gdal_ds, key, path)
        self._band_ids = band_ids
        self._flat = len(band_ids) == 1
        band = gdal_ds.GetRasterBand(band_ids[0])
        dtype = conv.dtype_of_gdt(band.DataType)

        shape = (gdal_ds.RasterYSize, gdal_ds.RasterXSize)
        if not self._flat:
            shape = shape + (len(band_ids),)

        metadata = dict(gdal_ds.GetMetadata() or {})
        wkt = gdal_ds.GetProjection()
        if wkt:
            metadata['crs'] = wkt
        gt = gdal_ds.GetGeoTransform(can_return_null=True)
        transform = None
        if gt is not None:
            transform = Affine.from_gdal(*gt)
            metadata['transform'] = transform

        super(GDALResource, self).__init__(
            path=path,
            key=key,
            mode=mode,
            shape=shape,
            dtype=dtype,
            missing_value=self._missing_value_of_band(band, dtype),
            metadata=metadata,
            dims=self._dims_of_transform(transform, shape),
        )

    @staticmethod
    def _band_ids_of_key(gdal_ds, key, path):
        band_ids = list(range(1, gdal_ds.RasterCount + 1))
        if not band_ids:
            raise BackendError('`{}` has no raster band'.format(path))
        if key is None:
            return band_ids
        descriptions = [gdal_ds.GetRasterBand(i).GetDescription() for i in band_ids]
        if key not in descriptions:
            raise BackendError('No band named `{}` in `{}`, available bands: {}'.format(
                key, path, descriptions,
            ))
        return [band_ids[descriptions.index(key)]]

    @staticmethod
    def _missing_value_of_band(band, dtype):
        nodata = band.GetNoDataValue()
        if nodata is None:
            return None
        if dtype.kind in 'iub' and float(nodata).is_integer():
            return int(nodata)
        return nodata

    @staticmethod
    def _dims_of_transform(transform, shape):
        ys, xs = None, None
        if transform is not None and transform.b == 0 and transform.d == 0:
            xs = transform.c + transform.a * (np.arange(shape[1]) + 0.5)
            ys = transform.f + transform.e * (np.arange(shape[0]) + 0.5)
        dims = (Dim('y', ys), Dim('x', xs))
        if len(shape) == 3:
            dims = dims + (Dim('band', np.arange(1, shape[2] + 1)),)
        return dims

    def _bands_of_block(self, block):
        if self._flat:
            return self._band_ids
        return self._band_ids[block[2]]

    def _read_block(self, block):
        ysl, xsl = block[0], block[1]
        dst = np.empty(_tools.shape_of_block(block), self.dtype)
        if dst.size == 0:
            return dst
        if self._flat:
            dst = dst[..., np.newaxis]

        for i, band_id in enumerate(self._bands_of_block(block)):
            gdal_band = self._gdal_ds.GetRasterBand(band_id)
            success, payload = GDALErrorCatcher(gdal_band.ReadAsArray, none_is_error=True)(
                int(xsl.start),
                int(ysl.start),
                int(xsl.stop - xsl.start),
                int(ysl.stop - ysl.start),
            )
            if not success:
                raise RasterIOError('Could not read `{}` (gdal error: `{}`)'.format(
                    self.path, payload
                ))
            dst[..., i] = payload

        if self._flat:
            dst = dst[..., 0]
        return dst

    def _write_block(self, block, array):
        ysl, xsl = block[0], block[1]
        if array.size == 0:
            return
        if self._flat:
            array = array[..., np.newaxis]
        for i, band_id in enumerate(self._bands_of_block(block)):
            gdal_band = self._gdal_ds.GetRasterBand(band_id)
            success, payload = GDALErrorCatcher(gdal_band.WriteArray, nonzero_int_is_error=True)(
                np.ascontiguousarray(array[..., i]), int(xsl.start), int(ysl.start),
            )
            if not success:
                raise RasterIOError('Could not write `{}` (gdal error: `{}`)'.format(
                    self.path, payload
                ))

    def _update(self, missing_value, metadata):
        for band_id in self._band_ids:
            gdal_band = self._gdal_ds.GetRasterBand(band_id)
            if missing_value is None:
                gdal_band.DeleteNoDataValue()
            else:
                gdal_band.SetNoDataValue(float(missing_value))
        _apply_metadata(self._gdal_ds, metadata)
        self._gdal_ds.FlushCache()

    def _close(self):
        self._gdal_ds.FlushCache()
        self._gdal_ds = None

def _apply_metadata(gdal_ds, metadata):
    if metadata.get('crs') is not None:
        gdal_ds.SetProjection(metadata['crs'])
    if metadata.get('transform') is not None:
        gdal_ds.SetGeoTransform(tuple(Affine(*metadata['transform'][:6]).to_gdal()))
    gdal_ds.SetMetadata(conv.str_metadata({
        k: v for k, v in metadata.items() if k not in {'crs', 'transform'}
    }))

class GDALBackend(ABackend):
    """Backend for GeoTIFF (`.tif`, `.tiff`) and Erdas Imagine (`.img`) files"""

    tag = 'gdal'
    extensions = ('.tif', '.tiff', '.img')
    supports_composite_write = False

    def open(self, path, key, mode):
        success, payload = GDALErrorCatcher(gdal.OpenEx, none_is_error=True)(
            path,
            conv.of_of_mode(mode),
        )
        if not success:
            raise BackendError('Could not open `{}` (gdal error: `{}`)'.format(
                path, payload
            ))
        return GDALResource(payload, path, key, mode)

    def layer_keys(self, path):
        with self.open(path, None, 'r') as resource:
            gdal_ds = resource._gdal_ds
            descriptions = [
                gdal_ds.GetRasterBand(i).GetDescription()
                for i in range(1, gdal_ds.RasterCount + 1)
            ]
        if len(descriptions) > 1 and all(descriptions) and len(set(descriptions)) == len(descriptions):
            return descriptions
        return [None]

    def write_single(self, path, raster):
        if raster.ndim not in (2, 3):
            raise ValueError('gdal can only write 2d (y, x) or 3d (y, x, band) rasters, not {}d'.format(
                raster.ndim
            ))
        array = np.asarray(raster)
        if array.ndim == 2:
            array = array[..., np.newaxis]
        rsizey, rsizex, band_count = array.shape

        # Step 0 - Find driver ********************************************** **
        driver = _DRIVER_OF_EXTENSION[BackendRegistry.extension_of_path(path)]
        success, payload = GDALErrorCatcher(gdal.GetDriverByName, none_is_error=True)(driver)
        if not success: # pragma: no cover
            raise BackendError('Could not find a driver named `{}` (gdal error: `{}`)'.format(
                driver, payload
            ))
        dr = payload

        # Step 1 - Overwrite ************************************************ **
        def _delete(path):
            success, payload = GDALErrorCatcher(dr.Delete, nonzero_int_is_error=True)(path)
            if not success:
                raise RasterIOError('Could not delete `{}` using driver `{}` (gdal error: `{}`)'.format(
                    path, dr.ShortName, payload
                ))
        self._prepare_target(path, _delete)

        # Step 2 - Create gdal_ds ******************************************* **
        gdt = conv.gdt_of_dtype(array.dtype)
        array = array.astype(conv.dtype_of_gdt(gdt), copy=False)
        success, payload = GDALErrorCatcher(dr.Create)(
            path, rsizex, rsizey, band_count, gdt, list(env.gdal_options),
        )
        if not success:
            raise BackendError('Could not create `{}` using driver `{}` (gdal error: `{}`)'.format(
                path, dr.ShortName, payload
            ))
        gdal_ds = payload

        try:
            # Step 3 - Set metadata ***************************************** **
            _apply_metadata(gdal_ds, raster.metadata)
            for i in range(band_count):
                gdal_band = gdal_ds.GetRasterBand(i + 1)
                if raster.missing_value is not None:
                    gdal_band.SetNoDataValue(float(raster.missing_value))
                if band_count == 1 and raster.name:
                    gdal_band.SetDescription(raster.name)

            # Step 4 - Write data ******************************************* **
            for i in range(band_count):
                gdal_band = gdal_ds.GetRasterBand(i + 1)
                success, payload = GDALErrorCatcher(gdal_band.WriteArray, nonzero_int_is_error=True)(
                    np.ascontiguousarray(array[..., i]), 0, 0,
                )
                if not success:
                    raise RasterIOError('Could not write `{}` (gdal error: `{}`)'.format(
                        path, payload
                    ))
            gdal_ds.FlushCache()
        except Exception:
            # The dataset is released before the partial file is deleted
            gdal_band = None
            gdal_ds = None
            LOGGER.warning('Deleting the partially written `{}`'.format(path))
            _delete(path)
            raise
        gdal_band = None
        gdal_ds = None
        LOGGER.debug('Created `{}` with driver `{}`, shape {}'.format(path, driver, array.shape))
