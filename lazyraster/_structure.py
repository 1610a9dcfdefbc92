"""Search and replace objects of a given type inside a tree of wrappers

The tree is made of `AStructural` objects, tuples and lists. Each `AStructural` class declares
which of its attributes are part of the tree in `_structural_fields`, all other attributes are
ignored. Mappings, sets, strings and numpy arrays are never searched into.

>>> handles = flatten(raster, FileHandle)
>>> opened = reconstruct(raster, [h.open() for h in handles], FileHandle)
"""

import collections.abc

import numpy as np

IGNORED = (
    collections.abc.Mapping,
    collections.abc.Set,
    np.ndarray,
    str,
    bytes,
)

class AStructural(object):
    """Base abstract class of the objects that can be traversed by `flatten` and rebuilt by
    `reconstruct`.

    Features Defined
    ----------------
    - A `_structural_fields` class attribute, the names of the attributes holding children
    - A `rebuild` method, returning a copy with some fields replaced
    """

    _structural_fields = ()

    def rebuild(self, **kwargs): # pragma: no cover
        raise NotImplementedError('AStructural.rebuild is virtual pure')

def flatten(obj, select, ignore=IGNORED):
    """Find all the objects of type `select` in the tree rooted at `obj`, in depth-first order.

    Parameters
    ----------
    obj: object
    select: type or tuple of type
    ignore: type or tuple of type
        Types that are never searched into

    Returns
    -------
    tuple
    """
    return tuple(_iter_selected(obj, select, ignore))

def reconstruct(obj, replacements, select, ignore=IGNORED):
    """Rebuild the tree rooted at `obj`, replacing the objects of type `select` by the elements of
    `replacements`, in the order of `flatten`.

    The parts of the tree that contain no replaced object are returned as is, the others are
    rebuilt with their `rebuild` method. All fields that are not on the path of a replaced
    object are carried over untouched.
    """
    it = iter(replacements)
    res = _reconstruct(obj, it, select, ignore)
    if next(it, _END) is not _END:
        raise ValueError('More replacements than `{}` objects in the tree'.format(select))
    return res

_END = object()

def _iter_selected(obj, select, ignore):
    if isinstance(obj, select):
        yield obj
    elif isinstance(obj, ignore):
        return
    elif isinstance(obj, AStructural):
        for name in obj._structural_fields:
            yield from _iter_selected(getattr(obj, name), select, ignore)
    elif isinstance(obj, (tuple, list)):
        for elt in obj:
            yield from _iter_selected(elt, select, ignore)

def _reconstruct(obj, it, select, ignore):
    if isinstance(obj, select):
        new = next(it, _END)
        if new is _END:
            raise ValueError('Less replacements than `{}` objects in the tree'.format(select))
        return new
    elif isinstance(obj, ignore):
        return obj
    elif isinstance(obj, AStructural):
        changes = {}
        for name in obj._structural_fields:
            old = getattr(obj, name)
            new = _reconstruct(old, it, select, ignore)
            if new is not old:
                changes[name] = new
        if not changes:
            return obj
        return obj.rebuild(**changes)
    elif isinstance(obj, (tuple, list)):
        elts = [_reconstruct(elt, it, select, ignore) for elt in obj]
        if all(new is old for new, old in zip(elts, obj)):
            return obj
        if isinstance(obj, list):
            return elts
        if type(obj) is tuple:
            return tuple(elts)
        # namedtuple
        return type(obj)(*elts)
    return obj
