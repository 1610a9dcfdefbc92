# pylint: disable=redefined-outer-name

import numpy as np
import pytest
from affine import Affine

import lazyraster as lr

@pytest.fixture()
def raster():
    arr = np.arange(24, dtype='int16').reshape(4, 6)
    return lr.Raster(
        arr,
        dims=('y', lr.Dim('x', np.arange(6) * 10.)),
        name='dem',
        metadata={'units': 'm', 'transform': Affine(10, 0, 0, 0, -10, 40)},
        missing_value=-1,
    )

def test_fields(raster):
    assert raster.shape == (4, 6)
    assert raster.dtype == np.int16
    assert raster.ndim == 2
    assert raster.size == 24
    assert len(raster) == 4
    assert raster.dim_names == ('y', 'x')
    assert raster.refdims == ()
    assert raster.name == 'dem'
    assert raster.missing_value == -1
    assert raster.units == 'm'
    assert raster.transform == Affine(10, 0, 0, 0, -10, 40)
    assert raster.crs is None
    assert raster.is_mem and not raster.is_disk
    assert raster.path is None
    assert 'dem' in repr(raster)

    assert lr.Raster(np.zeros((2, 3))).dim_names == ('dim_0', 'dim_1')
    assert lr.Raster(np.zeros(3), dims='t').dim_names == ('t',)

def test_invalid_construction(raster):
    with pytest.raises(TypeError):
        lr.Raster(raster)
    with pytest.raises(ValueError):
        lr.Raster(np.zeros((2, 3)), dims=('y',))
    with pytest.raises(ValueError):
        lr.Raster(np.zeros((2, 3)), dims=('y', 'y'))
    with pytest.raises(ValueError):
        lr.Raster(np.zeros((2, 3)), dims=('y', lr.Dim('x', [1, 2])))
    with pytest.raises(TypeError):
        lr.Raster(np.zeros((2, 3)), name=1)

def test_getitem(raster):
    arr = np.asarray(raster)

    sub = raster[1:3, ::2]
    assert sub.is_mem
    assert sub.shape == (2, 3)
    assert (np.asarray(sub) == arr[1:3, ::2]).all()
    assert sub.dims[1] == lr.Dim('x', [0., 20., 40.])
    assert sub.name == 'dem'
    assert sub.metadata is raster.metadata
    assert sub.missing_value == -1

    row = raster[2]
    assert row.shape == (6,)
    assert row.dim_names == ('x',)
    assert row.refdims == (lr.Dim('y'),)

    px = raster[-1, 1]
    assert px.shape == ()
    assert px.refdims == (lr.Dim('y'), lr.Dim('x', [10.]))
    assert np.asarray(px) == arr[-1, 1]

    assert raster[...] == raster
    assert raster[5:].shape == (0, 6)
    with pytest.raises(lr.BoundsError):
        raster[4]
    with pytest.raises(IndexError):
        raster[0, 0, 0]

def test_view_is_lazy(raster):
    view = raster.view(np.s_[1:, 3])
    assert isinstance(view.payload, lr.ArrayView)
    assert view.payload.parent is raster.payload
    assert view.shape == (3,)

    # Views see later writes
    raster.payload.array[2, 3] = 99
    assert np.asarray(view)[1] == 99

def test_setitem(raster):
    expected = np.asarray(raster).copy()

    raster[0] = 7
    expected[0] = 7
    raster[1:3, ::2] = [[1, 2, 3], [4, 5, 6]]
    expected[1:3, ::2] = [[1, 2, 3], [4, 5, 6]]
    raster[3, 5] = raster[0, 0]
    expected[3, 5] = expected[0, 0]
    raster[..., 1] = np.arange(4)
    expected[..., 1] = np.arange(4)
    assert (np.asarray(raster) == expected).all()

    # Writes through a view reach the source
    view = raster.view(np.s_[::3, 1:])
    view[0, 0] = -3
    expected[0, 1] = -3
    assert (np.asarray(raster) == expected).all()

    with pytest.raises(ValueError):
        raster[0] = [1, 2]

def test_pixels(raster):
    arr = np.asarray(raster).copy()

    px = raster[1, 2]
    assert isinstance(np.asarray(px), np.ndarray)
    assert np.asarray(px).shape == ()
    assert px == lr.Raster(arr[1, 2])
    assert raster.view(np.s_[1:3]).view(np.s_[0, 2]) == px
    assert isinstance(px.payload.read_block(()), np.ndarray)
    assert isinstance(raster.view(np.s_[1, 2]).payload.read_block(()), np.ndarray)

    raster[0, 0] = raster[1, 2]
    assert np.asarray(raster)[0, 0] == arr[1, 2]

def test_rebuild(raster):
    same = raster.rebuild()
    assert same is not raster
    assert same.payload is raster.payload
    assert same.dims is raster.dims
    assert same.metadata is raster.metadata

    renamed = raster.rebuild(name='other', missing_value=None)
    assert renamed.name == 'other'
    assert renamed.dims is raster.dims
    assert raster.rebuild(payload=np.zeros((4, 6))).dims is raster.dims
    assert renamed.missing_value is None
    assert raster.name == 'dem'

    reshaped = raster.rebuild(payload=np.zeros((2, 2)))
    assert reshaped.dim_names == ('dim_0', 'dim_1')
    assert reshaped.name == 'dem'

    with pytest.raises(TypeError, match='shape'):
        raster.rebuild(shape=(1, 1))

def test_eq(raster):
    assert raster == raster.read()
    assert raster != raster[1:]
    other = raster.read()
    other[0, 0] = 100
    assert raster != other
    assert raster.__eq__(np.asarray(raster)) is NotImplemented
    with pytest.raises(TypeError):
        hash(raster)

def test_concat(raster):
    a, b = raster[:1], raster[1:]
    c = lr.concat([a, b], 'y')
    assert isinstance(c.payload, lr.ConcatArray)
    assert c == raster
    assert c.dims[1] == raster.dims[1]

    d = lr.concat([raster[:, :2], raster[:, 2:]], 'x')
    assert d == raster
    assert d.dims[1] == raster.dims[1]

    # Writes are dispatched to the parts
    c[0:2, 0] = -10
    assert (np.asarray(a)[:, 0] == -10).all()
    assert np.asarray(b)[0, 0] == -10

    with pytest.raises(ValueError):
        lr.concat([], 'y')
    with pytest.raises(ValueError):
        lr.concat([raster], 't')
    with pytest.raises(ValueError):
        lr.concat([raster, raster[0]], 'y')
    with pytest.raises(ValueError):
        lr.concat([raster, raster[:, 1:]], 'y')

def test_dims():
    x = lr.Dim('x', np.arange(10) + 0.5)
    assert x[2:4] == lr.Dim('x', [2.5, 3.5])
    assert x[3] == lr.Dim('x', [3.5])
    assert x != lr.Dim('x')
    assert x != lr.Dim('y', np.arange(10) + 0.5)
    assert lr.Dim('t')[5] == lr.Dim('t')
    with pytest.raises(TypeError):
        lr.Dim(0)
    with pytest.raises(ValueError):
        lr.Dim('x', np.zeros((2, 2)))

def test_write_in_memory_without_path(raster):
    with pytest.raises(ValueError):
        raster.write()
