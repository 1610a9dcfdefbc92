# pylint: disable=redefined-outer-name

import numpy as np
import pytest

import lazyraster as lr

def _raster(name, shape=(3, 4), dims=('y', 'x'), fill=0):
    return lr.Raster(np.full(shape, fill, 'float64'), dims=dims, name=name)

def test_construction():
    a, b = _raster('a', fill=1), _raster('b', fill=2)

    s1 = lr.RasterStack({'first': a, 'second': b})
    s2 = lr.RasterStack([('first', a), ('second', b)])
    s3 = lr.RasterStack([a, b])
    assert list(s1) == ['first', 'second']
    assert list(s2) == ['first', 'second']
    assert list(s3) == ['a', 'b']
    assert s1['first'] is a
    assert len(s3) == 2
    assert 'b' in s3
    assert s3.dims == {'y': 3, 'x': 4}
    assert not s3.is_disk

    # Dimension spaces may differ as long as shared dimensions agree
    c = _raster('c', shape=(3, 2), dims=('y', 'band'))
    assert lr.RasterStack([a, c]).dims == {'y': 3, 'x': 4, 'band': 2}

def test_invalid_construction():
    a = _raster('a')
    with pytest.raises(ValueError, match='twice'):
        lr.RasterStack([a, _raster('a')])
    with pytest.raises(ValueError, match='size'):
        lr.RasterStack([a, _raster('b', shape=(3, 5))])
    with pytest.raises(TypeError):
        lr.RasterStack({1: a})
    with pytest.raises(TypeError):
        lr.RasterStack({'a': np.zeros(3)})

def test_read():
    a = _raster('a', fill=1)
    v = a.view(np.s_[1:])
    stack = lr.RasterStack({'v': v, 'b': _raster('b', shape=(2, 4), fill=2)})
    mem = stack.read()
    assert isinstance(mem['v'].payload, lr.MemoryArray)
    assert mem['v'] == v
    assert list(mem) == ['v', 'b']
