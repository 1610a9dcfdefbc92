"""Payloads are the array-like objects held by a Raster

- MemoryArray: an in-memory numpy array
- LazyArray: a file backed array (see _lazy_array.py)
- ArrayView: a lazy window on another payload
- ConcatArray: a lazy concatenation of payloads along an axis
"""

import numpy as np

from lazyraster._structure import AStructural
from lazyraster import _tools

class APayload(AStructural):
    """Base abstract class defining the common behavior of all payloads

    Features Defined
    ----------------
    - Has `shape`, `dtype`, `ndim` and `is_disk`
    - Block-wise `read_block` and `write_block`
    """

    @property
    def shape(self): # pragma: no cover
        raise NotImplementedError('APayload.shape is virtual pure')

    @property
    def dtype(self): # pragma: no cover
        raise NotImplementedError('APayload.dtype is virtual pure')

    @property
    def ndim(self):
        return len(self.shape)

    @property
    def is_disk(self): # pragma: no cover
        """Whether reading this payload requires I/O"""
        raise NotImplementedError('APayload.is_disk is virtual pure')

    def read_block(self, block): # pragma: no cover
        raise NotImplementedError('APayload.read_block is virtual pure')

    def write_block(self, block, array): # pragma: no cover
        raise NotImplementedError('APayload.write_block is virtual pure')

    def __array__(self, dtype=None, copy=None):
        array = self.read_block(_tools.full_block(self.shape))
        if dtype is not None:
            array = array.astype(dtype, copy=False)
        return array

class MemoryArray(APayload):
    """Payload wrapping a numpy array, writes are performed in place in that array"""

    def __init__(self, array):
        self._arr = np.asarray(array)

    @property
    def array(self):
        return self._arr

    @property
    def shape(self):
        return self._arr.shape

    @property
    def dtype(self):
        return self._arr.dtype

    @property
    def is_disk(self):
        return False

    def read_block(self, block):
        block = _tools.check_block(block, self.shape)
        return np.array(self._arr[block])

    def write_block(self, block, array):
        block = _tools.check_block(block, self.shape)
        self._arr[block] = array

    def rebuild(self, array=None):
        if array is None:
            return self
        return MemoryArray(array)

    def __repr__(self):
        return '<MemoryArray shape={} dtype={}>'.format(self.shape, self.dtype)

class ArrayView(APayload):
    """Lazy window on another payload

    Parameters
    ----------
    parent: APayload
    key: index
        Integers, slices with positive steps and ellipsis. The axes indexed by an integer are
        dropped.
    """

    _structural_fields = ('parent',)

    def __init__(self, parent, key):
        self._parent = parent
        self._key = tuple(_tools.normalize_key(key, parent.shape))
        self._shape = _tools.shape_of_key(self._key)

    @property
    def parent(self):
        return self._parent

    @property
    def key(self):
        """Normalized key, a tuple of int and slice"""
        return self._key

    @property
    def shape(self):
        return self._shape

    @property
    def dtype(self):
        return self._parent.dtype

    @property
    def is_disk(self):
        return self._parent.is_disk

    def read_block(self, block):
        block = _tools.check_block(block, self._shape)
        parent_block, post = _tools.parent_block_of_key(self._key, block)
        return np.asarray(self._parent.read_block(parent_block)[post])

    def write_block(self, block, array):
        block = _tools.check_block(block, self._shape)
        parent_block, post = _tools.parent_block_of_key(self._key, block)
        array = np.broadcast_to(np.asarray(array), _tools.shape_of_block(block))

        # Restore the axes dropped by integer indices
        array = array.reshape(_expanded_shape(post, array.shape))

        post = tuple(slice(None) if isinstance(p, int) else p for p in post)
        if all(p.step in (None, 1) for p in post):
            self._parent.write_block(parent_block, array)
        else:
            dst = self._parent.read_block(parent_block)
            dst[post] = array
            self._parent.write_block(parent_block, dst)

    def rebuild(self, parent=None):
        if parent is None:
            return self
        res = ArrayView.__new__(ArrayView)
        res._parent = parent
        res._key = self._key
        res._shape = self._shape
        return res

    def __repr__(self):
        return '<ArrayView {} of {!r}>'.format(self._key, self._parent)

def _expanded_shape(post, shape):
    it = iter(shape)
    return tuple(
        1 if isinstance(p, int) else next(it)
        for p in post
    )

class ConcatArray(APayload):
    """Lazy concatenation of payloads along `axis`"""

    _structural_fields = ('parts',)

    def __init__(self, parts, axis):
        parts = tuple(parts)
        if not parts:
            raise ValueError('ConcatArray needs at least one part')
        ndim = parts[0].ndim
        axis = int(axis)
        if not 0 <= axis < ndim:
            raise ValueError('axis {} out of range for {} dimensions'.format(axis, ndim))
        for part in parts[1:]:
            if part.ndim != ndim:
                raise ValueError('All parts should have the same number of dimensions')
            others = [n for i, n in enumerate(part.shape) if i != axis]
            if others != [n for i, n in enumerate(parts[0].shape) if i != axis]:
                raise ValueError('Shapes {} and {} cannot be concatenated along axis {}'.format(
                    parts[0].shape, part.shape, axis,
                ))
        self._parts = parts
        self._axis = axis
        self._offsets = np.cumsum([0] + [p.shape[axis] for p in parts]).tolist()
        self._dtype = np.result_type(*[p.dtype for p in parts])

    @property
    def parts(self):
        return self._parts

    @property
    def axis(self):
        return self._axis

    @property
    def shape(self):
        shape = list(self._parts[0].shape)
        shape[self._axis] = self._offsets[-1]
        return tuple(shape)

    @property
    def dtype(self):
        return self._dtype

    @property
    def is_disk(self):
        return any(p.is_disk for p in self._parts)

    def _iter_overlaps(self, block):
        """Yield (part, block in part, slice in block) for all parts overlapping `block`"""
        sl = block[self._axis]
        for part, start, stop in zip(self._parts, self._offsets[:-1], self._offsets[1:]):
            a, b = max(sl.start, start), min(sl.stop, stop)
            if a >= b:
                continue
            part_block = list(block)
            part_block[self._axis] = slice(a - start, b - start)
            yield part, tuple(part_block), slice(a - sl.start, b - sl.start)

    def read_block(self, block):
        block = _tools.check_block(block, self.shape)
        dst = np.empty(_tools.shape_of_block(block), self._dtype)
        for part, part_block, dst_slice in self._iter_overlaps(block):
            index = [slice(None)] * len(block)
            index[self._axis] = dst_slice
            dst[tuple(index)] = part.read_block(part_block)
        return dst

    def write_block(self, block, array):
        block = _tools.check_block(block, self.shape)
        array = np.broadcast_to(np.asarray(array), _tools.shape_of_block(block))
        for part, part_block, src_slice in self._iter_overlaps(block):
            index = [slice(None)] * len(block)
            index[self._axis] = src_slice
            part.write_block(part_block, array[tuple(index)])

    def rebuild(self, parts=None):
        if parts is None:
            return self
        return ConcatArray(parts, self._axis)

    def __repr__(self):
        return '<ConcatArray axis={} of {} parts>'.format(self._axis, len(self._parts))
