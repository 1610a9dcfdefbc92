# pylint: disable=redefined-outer-name

import os

import numpy as np
import pytest
from affine import Affine

import lazyraster as lr
from lazyraster.test.tools import make_tmp_dir, remove_tmp_dir

gdal = pytest.importorskip('osgeo.gdal')

TRANSFORM = Affine(10, 0, 1000, 0, -10, 5000)
WKT = (
    'GEOGCS["WGS 84",DATUM["WGS_1984",SPHEROID["WGS 84",6378137,298.257223563]],'
    'PRIMEM["Greenwich",0],UNIT["degree",0.0174532925199433]]'
)

# FIXTURES ************************************************************************************** **
@pytest.fixture()
def tmp_dir():
    path = make_tmp_dir()
    yield path
    remove_tmp_dir(path)

@pytest.fixture()
def raster():
    arr = np.arange(6 * 7, dtype='int16').reshape(6, 7)
    return lr.Raster(
        arr,
        dims=('y', 'x'),
        name='dem',
        metadata={'transform': TRANSFORM, 'crs': WKT, 'source': 'survey'},
        missing_value=-99,
    )

def _create_tif(path, arr, descriptions=()):
    dr = gdal.GetDriverByName('GTiff')
    ysize, xsize, count = arr.shape
    ds = dr.Create(path, xsize, ysize, count, gdal.GDT_Float32)
    ds.SetGeoTransform(TRANSFORM.to_gdal())
    for i in range(count):
        band = ds.GetRasterBand(i + 1)
        band.WriteArray(arr[..., i])
        if descriptions:
            band.SetDescription(descriptions[i])
    ds.FlushCache()
    del ds

# TESTS ***************************************************************************************** **
def test_single_band(tmp_dir, raster):
    path = os.path.join(tmp_dir, 'dem.tif')
    assert lr.write(path, raster) == path

    r = lr.open_raster(path)
    assert r.shape == (6, 7)
    assert r.dtype == np.int16
    assert r.dim_names == ('y', 'x')
    assert r.missing_value == -99
    assert isinstance(r.missing_value, int)
    assert r.transform == TRANSFORM
    assert r.crs
    assert r.metadata['source'] == 'survey'
    assert r == raster

    # Pixel centers
    assert r.dims[1].lookup[0] == 1005
    assert r.dims[0].lookup[0] == 4995
    assert r[2:4].dims[0] == lr.Dim('y', [4975, 4965])

def test_multi_band(tmp_dir):
    path = os.path.join(tmp_dir, 'rgb.tif')
    arr = np.random.rand(4, 5, 3).astype('float32')
    _create_tif(path, arr, ['red', 'green', 'blue'])

    r = lr.open_raster(path)
    assert r.shape == (4, 5, 3)
    assert r.dim_names == ('y', 'x', 'band')
    assert r.missing_value is None
    assert (np.asarray(r) == arr).all()
    assert (np.asarray(r[1:3, 2:, 1:]) == arr[1:3, 2:, 1:]).all()
    assert (np.asarray(r[..., 2]) == arr[..., 2]).all()

    green = lr.open_raster(path, key='green')
    assert green.name == 'green'
    assert green.shape == (4, 5)
    assert (np.asarray(green) == arr[..., 1]).all()
    with pytest.raises(lr.BackendError, match='available'):
        lr.open_raster(path, key='nir')

    stack = lr.open_stack(path)
    assert list(stack) == ['red', 'green', 'blue']

    # Writing 3 dimensional rasters
    dst = os.path.join(tmp_dir, 'copy.tif')
    lr.write(dst, r.view(np.s_[:, :, ::2]))
    copy = lr.open_raster(dst)
    assert copy.shape == (4, 5, 2)
    assert (np.asarray(copy) == arr[..., ::2]).all()

def test_stack_fallback(tmp_dir, raster):
    stack = lr.RasterStack({
        'a': raster,
        'b': raster.rebuild(payload=np.asarray(raster) * 2),
        'c': raster.rebuild(payload=np.asarray(raster) * 3),
    })
    path = os.path.join(tmp_dir, 'out.tif')
    paths = lr.write(path, stack)
    assert sorted(os.listdir(tmp_dir)) == ['out_a.tif', 'out_b.tif', 'out_c.tif']
    for p, name in zip(paths, 'abc'):
        r = lr.open_raster(p)
        assert r == stack[name]

    with pytest.raises(lr.ArgumentCountError):
        lr.write(os.path.join(tmp_dir, 'other.tif'), stack, suffix=['_1'])
    assert len(os.listdir(tmp_dir)) == 3

def test_session(tmp_dir, raster):
    path = os.path.join(tmp_dir, 'dem.tif')
    lr.write(path, raster)
    r = lr.open_raster(path)

    def _op(opened):
        opened[0:2, 0:3] = -1
        opened[5] = opened[4]

    lr.with_open(r, _op, mode='w')
    expected = np.asarray(raster).copy()
    expected[0:2, 0:3] = -1
    expected[5] = expected[4]
    assert (np.asarray(r) == expected).all()

    with pytest.raises(lr.RasterIOError):
        lr.with_open(r, _op)

    # In place update of the nodata value
    r.rebuild(missing_value=None, metadata={}).write()
    assert lr.open_raster(path).missing_value is None

def test_gdal_options(tmp_dir, raster):
    path = os.path.join(tmp_dir, 'dem.tif')
    with lr.Env(gdal_options=['COMPRESS=DEFLATE']):
        lr.write(path, raster)
    ds = gdal.Open(path)
    assert ds.GetMetadata('IMAGE_STRUCTURE').get('COMPRESSION') == 'DEFLATE'
    del ds

def test_upcast(tmp_dir):
    path = os.path.join(tmp_dir, 'mask.tif')
    mask = np.eye(4, dtype=bool)
    lr.write(path, lr.Raster(mask))
    r = lr.open_raster(path)
    assert r.dtype == np.uint8
    assert (np.asarray(r) == mask).all()

def test_failed_write_removes_file(tmp_dir, raster, monkeypatch):
    path = os.path.join(tmp_dir, 'dem.tif')

    def _fail(self, *args, **kwargs):
        return 1

    monkeypatch.setattr(gdal.Band, 'WriteArray', _fail)
    with pytest.raises(lr.RasterIOError, match='Could not write'):
        lr.write(path, raster)
    assert not os.path.exists(path)

    monkeypatch.undo()
    lr.write(path, raster)
    assert lr.open_raster(path) == raster

def test_errors(tmp_dir, raster):
    path = os.path.join(tmp_dir, 'garbage.tif')
    with open(path, 'w') as stream:
        stream.write('not a tif')
    with pytest.raises(lr.BackendError):
        lr.open_raster(path)

    with pytest.raises(ValueError):
        lr.write(os.path.join(tmp_dir, 'cube.tif'), lr.Raster(np.zeros((2, 2, 2, 2))))
