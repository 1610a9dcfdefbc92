""">>> help(Dim)"""

import numbers

import numpy as np

class Dim(object):
    """A named dimension of a Raster, with optional coordinates

    Parameters
    ----------
    name: str
    lookup: None or sequence of length `size`
        Coordinates of the cells along this dimension, like the pixel centers along `x`.

    Example
    -------
    >>> x = Dim('x', np.arange(10) + 0.5)
    >>> x[2:4].lookup
    array([2.5, 3.5])

    """

    def __init__(self, name, lookup=None):
        if not isinstance(name, str):
            raise TypeError('Dim name should be a string, not `{}`'.format(type(name)))
        if lookup is not None:
            lookup = np.asarray(lookup)
            if lookup.ndim != 1:
                raise ValueError('Dim lookup should be 1-dimensional')
        self._name = name
        self._lookup = lookup

    @property
    def name(self):
        return self._name

    @property
    def lookup(self):
        """Coordinates along this dimension, or None"""
        return self._lookup

    def __getitem__(self, key):
        if self._lookup is None:
            return self
        if isinstance(key, numbers.Integral):
            key = slice(key, key + 1)
        return Dim(self._name, self._lookup[key])

    def __eq__(self, other):
        if not isinstance(other, Dim):
            return NotImplemented
        if self._name != other._name:
            return False
        if self._lookup is None or other._lookup is None:
            return self._lookup is None and other._lookup is None
        return bool(np.array_equal(self._lookup, other._lookup))

    def __hash__(self):
        return hash(self._name)

    def __repr__(self):
        if self._lookup is None:
            return 'Dim({!r})'.format(self._name)
        return 'Dim({!r}, <{} values>)'.format(self._name, len(self._lookup))

def format_dims(dims, shape):
    """Normalize the `dims` parameter of a Raster to a tuple of Dim matching `shape`

    Parameters
    ----------
    dims: None or sequence of (str or Dim)
        None to name the dimensions `dim_0`, `dim_1`, ...
    shape: tuple of int
    """
    if dims is None:
        return tuple(Dim('dim_{}'.format(i)) for i in range(len(shape)))
    if isinstance(dims, (str, Dim)):
        dims = (dims,)
    # A valid tuple of Dim is returned as is, rebuilt rasters share it
    if not (isinstance(dims, tuple) and all(isinstance(d, Dim) for d in dims)):
        dims = tuple(
            d if isinstance(d, Dim) else Dim(d)
            for d in dims
        )
    if len(dims) != len(shape):
        raise ValueError('{} dims provided for an array of shape {}'.format(len(dims), shape))
    names = [d.name for d in dims]
    if len(set(names)) != len(names):
        raise ValueError('Dim names should be unique, found {}'.format(names))
    for d, size in zip(dims, shape):
        if d.lookup is not None and len(d.lookup) != size:
            raise ValueError('Dim `{}` has {} coordinates for a size of {}'.format(
                d.name, len(d.lookup), size,
            ))
    return dims

def slice_dims(dims, refdims, key):
    """Apply a normalized key to dims. The dimensions indexed with an integer are moved to the
    reference dimensions.

    Returns
    -------
    (tuple of Dim, tuple of Dim)
    """
    new_dims, new_refdims = [], list(refdims)
    for d, k in zip(dims, key):
        if isinstance(k, slice):
            new_dims.append(d[k])
        else:
            new_refdims.append(d[k])
    return tuple(new_dims), tuple(new_refdims)
