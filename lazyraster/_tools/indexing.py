"""Private tools to normalize array indexing keys and block requests

A `block` is a tuple of contiguous slices, one per axis, with 0 <= start <= stop <= size.
A `key` is what the user passes to `__getitem__`: ints, slices and at most one Ellipsis.
"""

import numbers

from lazyraster._errors import BoundsError

def full_block(shape):
    """Block covering a whole array"""
    return tuple(slice(0, size) for size in shape)

def shape_of_block(block):
    return tuple(sl.stop - sl.start for sl in block)

def check_block(block, shape):
    """Validate a block request against a shape and return it with explicit bounds"""
    if not isinstance(block, tuple):
        block = tuple(block)
    if len(block) != len(shape):
        raise BoundsError('Block of {} dimension(s) requested on an array of shape {}'.format(
            len(block), shape,
        ))
    res = []
    for sl, size in zip(block, shape):
        if not isinstance(sl, slice):
            raise TypeError('Blocks should be tuples of slices, not `{}`'.format(type(sl)))
        if sl.step not in (None, 1):
            raise ValueError('Blocks should be contiguous, found step `{}`'.format(sl.step))
        start = 0 if sl.start is None else sl.start
        stop = size if sl.stop is None else sl.stop
        if not 0 <= start <= stop <= size:
            raise BoundsError('Block `{}` exceeds the shape {}'.format(block, shape))
        res.append(slice(start, stop))
    return tuple(res)

def normalize_key(key, shape):
    """Convert a user key to a list of non-negative ints and of slices with explicit positive
    steps, one element per axis of `shape`.
    """
    if not isinstance(key, tuple):
        key = (key,)
    ellipsis_count = sum(1 for k in key if k is Ellipsis)
    if ellipsis_count > 1:
        raise IndexError('An index can only have a single ellipsis')
    if ellipsis_count == 1:
        i = next(i for i, k in enumerate(key) if k is Ellipsis)
        fill = len(shape) - (len(key) - 1)
        key = key[:i] + (slice(None),) * max(fill, 0) + key[i + 1:]
    if len(key) > len(shape):
        raise BoundsError('Too many indices ({}) for an array of shape {}'.format(
            len(key), shape,
        ))
    key = key + (slice(None),) * (len(shape) - len(key))

    res = []
    for k, size in zip(key, shape):
        if isinstance(k, slice):
            start, stop, step = k.indices(size)
            if step <= 0:
                raise ValueError('Only positive slice steps are supported')
            stop = max(stop, start)
            res.append(slice(start, stop, step))
        elif isinstance(k, numbers.Integral) and not isinstance(k, bool):
            k = int(k)
            if k < 0:
                k += size
            if not 0 <= k < size:
                raise BoundsError('Index {} is out of bounds for an axis of size {}'.format(
                    k, size,
                ))
            res.append(k)
        else:
            raise TypeError('Only integers, slices and ellipsis are valid indices, not `{}`'.format(
                type(k),
            ))
    return res

def shape_of_key(key):
    """Shape resulting from a normalized key"""
    return tuple(
        len(range(k.start, k.stop, k.step))
        for k in key
        if isinstance(k, slice)
    )

def parent_block_of_key(key, block):
    """Translate a block expressed in the frame of a normalized key to the frame of the indexed
    array.

    Returns
    -------
    parent_block: tuple of slice
        Contiguous block to request on the indexed array
    post: tuple of (int or slice)
        Indexer to apply to the `parent_block` array to obtain `block`
    """
    parent_block, post = [], []
    it = iter(block)
    for k in key:
        if not isinstance(k, slice):
            parent_block.append(slice(k, k + 1))
            post.append(0)
            continue
        sl = next(it)
        if sl.stop <= sl.start:
            parent_block.append(slice(k.start, k.start))
            post.append(slice(None))
            continue
        start = k.start + sl.start * k.step
        stop = k.start + (sl.stop - 1) * k.step + 1
        parent_block.append(slice(start, stop))
        post.append(slice(None, None, k.step))
    return tuple(parent_block), tuple(post)
