# pylint: disable=redefined-outer-name

import os
import logging

import numpy as np
import pytest

import lazyraster as lr
from lazyraster.test.tools import register_npz_backend, save_npz, make_tmp_dir, remove_tmp_dir

ARR = np.arange(12, dtype='int32').reshape(3, 4)

# FIXTURES ************************************************************************************** **
@pytest.fixture()
def npz_backend():
    backend = register_npz_backend()
    yield backend
    lr.backend_registry.unregister(backend.tag)

@pytest.fixture()
def tmp_dir():
    path = make_tmp_dir()
    yield path
    remove_tmp_dir(path)

@pytest.fixture()
def stack():
    return lr.RasterStack([
        lr.Raster(ARR + i, dims=('y', 'x'), name=name, missing_value=-i)
        for i, name in enumerate('abc')
    ])

def _listdir(path):
    return sorted(os.listdir(path))

# TESTS ***************************************************************************************** **
def test_write_raster(tmp_dir, npz_backend):
    path = os.path.join(tmp_dir, 'out.npzt')
    r = lr.Raster(ARR, dims=('y', 'x'), metadata={'units': 'm'}, missing_value=-1)
    assert lr.write(path, r) == path
    assert npz_backend.written == [path]

    r2 = lr.open_raster(path)
    assert r2.is_disk
    assert r2.path == path
    assert r2 == r
    assert r2.dim_names == ('y', 'x')
    assert r2.missing_value == -1
    assert r2.metadata == {'units': 'm'}
    assert r2.dtype == np.int32

    with pytest.raises(TypeError, match='suffix'):
        lr.write(path, r, suffix=['_a'])
    with pytest.raises(TypeError):
        lr.write(path, ARR)

def test_overwrite(tmp_dir, npz_backend):
    path = os.path.join(tmp_dir, 'out.npzt')
    lr.write(path, lr.Raster(ARR))
    with lr.Env(overwrite=False):
        with pytest.raises(lr.RasterIOError, match='overwrite'):
            lr.write(path, lr.Raster(ARR * 2))
    assert lr.open_raster(path) == lr.Raster(ARR)

    lr.write(path, lr.Raster(ARR * 2))
    assert lr.open_raster(path) == lr.Raster(ARR * 2)

def test_stack_fallback(tmp_dir, npz_backend, stack, caplog):
    path = os.path.join(tmp_dir, 'out.npzt')
    with caplog.at_level(logging.INFO, logger='lazyraster'):
        paths = lr.write(path, stack)
    assert paths == [os.path.join(tmp_dir, 'out_{}.npzt'.format(c)) for c in 'abc']
    assert _listdir(tmp_dir) == ['out_a.npzt', 'out_b.npzt', 'out_c.npzt']
    assert any('writing 3 files' in rec.getMessage() for rec in caplog.records)

    for i, (name, p) in enumerate(zip('abc', paths)):
        r = lr.open_raster(p)
        assert r == stack[name]
        assert r.missing_value == -i

    stack2 = lr.open_stack(paths[1])
    assert list(stack2) == ['out_b']
    assert stack2['out_b'] == stack['b']

def test_stack_suffixes(tmp_dir, npz_backend, stack):
    path = os.path.join(tmp_dir, 'out.npzt')
    paths = stack.write(path, suffix=['-1', '-2', '-3'])
    assert _listdir(tmp_dir) == ['out-1.npzt', 'out-2.npzt', 'out-3.npzt']
    assert lr.open_raster(paths[2]) == stack['c']

    with lr.Env(suffix_format='.{}.layer'):
        paths = stack.write(path)
    assert paths[0] == os.path.join(tmp_dir, 'out.a.layer.npzt')
    assert len(_listdir(tmp_dir)) == 6

def test_suffix_mismatch_creates_nothing(tmp_dir, npz_backend, stack):
    path = os.path.join(tmp_dir, 'out.npzt')
    with pytest.raises(lr.ArgumentCountError):
        lr.write(path, stack, suffix=['_a', '_b'])
    with pytest.raises(lr.ArgumentCountError):
        lr.write(path, stack, suffix=['_a', '_b', '_c', '_d'])
    with pytest.raises(ValueError, match='unique'):
        lr.write(path, stack, suffix=['_a', '_a', '_c'])
    assert _listdir(tmp_dir) == []
    assert npz_backend.written == []
    assert npz_backend.opened == []

def test_write_file_backed(tmp_dir, npz_backend):
    src = os.path.join(tmp_dir, 'src.npzt')
    save_npz(src, ARR, None, {'k': 1}, ['y', 'x'])
    raster = lr.open_raster(src)

    dst = os.path.join(tmp_dir, 'dst.npzt')
    lr.write(dst, raster.view(np.s_[1:]))
    assert npz_backend.open_count == 0
    assert [r.mode for r in npz_backend.opened] == ['r', 'r']
    assert lr.open_raster(dst) == lr.Raster(ARR[1:])
    assert lr.open_raster(dst).metadata == {'k': 1}

    # File backed members of a stack are each opened for their own write
    stack = lr.RasterStack({'a': raster, 'b': lr.Raster(ARR * 0, dims=('y', 'x'))})
    paths = lr.write(os.path.join(tmp_dir, 'dst.npzt'), stack)
    assert npz_backend.open_count == 0
    assert lr.open_raster(paths[0]) == raster

def test_write_in_place(tmp_dir, npz_backend):
    path = os.path.join(tmp_dir, 'dem.npzt')
    save_npz(path, ARR, None, {}, ['y', 'x'])
    raster = lr.open_raster(path)

    raster.rebuild(missing_value=5, metadata={'units': 'cm'}).write()
    assert [r.mode for r in npz_backend.opened][-1] == 'w'
    assert npz_backend.open_count == 0
    assert npz_backend.written == []

    reopened = lr.open_raster(path)
    assert reopened.missing_value == 5
    assert reopened.metadata == {'units': 'cm'}
    assert reopened == raster

    with pytest.raises(ValueError, match='in place'):
        lr.write(path, raster.view(np.s_[1:]))
    assert npz_backend.open_count == 0
    assert lr.open_raster(path) == raster

def test_write_in_place_edited(tmp_dir, npz_backend):
    path = os.path.join(tmp_dir, 'dem.npzt')
    save_npz(path, ARR, None, {'units': 'm'}, ['y', 'x'])
    raster = lr.open_raster(path)

    top = lr.Raster(np.full((1, 4), 99, 'int32'), dims=('y', 'x'))
    edited = lr.concat([top, raster.view(np.s_[1:])], 'y').rebuild(metadata=raster.metadata)
    assert edited.path == path
    assert lr.write(path, edited) == path
    assert npz_backend.open_count == 0
    assert npz_backend.written == []
    assert [r.mode for r in npz_backend.opened][-1] == 'w'

    expected = ARR.copy()
    expected[0] = 99
    reopened = lr.open_raster(path)
    assert (np.asarray(reopened) == expected).all()
    assert reopened.metadata == {'units': 'm'}

def test_write_several_files_fails(tmp_dir, npz_backend):
    a = os.path.join(tmp_dir, 'a.npzt')
    b = os.path.join(tmp_dir, 'b.npzt')
    save_npz(a, ARR, None, {}, ['y', 'x'])
    save_npz(b, ARR, None, {}, ['y', 'x'])
    both = lr.concat([lr.open_raster(a), lr.open_raster(b)], 'y')
    dst = os.path.join(tmp_dir, 'dst.npzt')

    with pytest.raises(lr.MultipleResourcesError):
        lr.write(dst, both)
    assert not os.path.exists(dst)

    lr.write(dst, both.read())
    assert lr.open_raster(dst) == both
