"""Private tools to normalize functions parameters"""

import os
import collections.abc

from lazyraster._errors import ArgumentCountError

_MODES = frozenset({'r', 'w'})

def normalize_mode(mode):
    mode = str(mode)
    if mode not in _MODES:
        raise ValueError('`mode` should be one of {{r, w}}, not `{}`'.format(mode))
    return mode

def normalize_path(path):
    if not isinstance(path, (str, os.PathLike)):
        raise TypeError('`path` should be a string or a path-like, not `{}`'.format(type(path)))
    return os.fspath(path)

def normalize_key_parameter(key):
    """Normalize the selector of a layer in a multi-layer source"""
    if key is None:
        return None
    if not isinstance(key, str):
        raise TypeError('`key` should be None or a string, not `{}`'.format(type(key)))
    return key

def normalize_suffix_parameter(suffix, names, suffix_format):
    """Compute the suffixes of the files written for each item of a collection

    Parameters
    ----------
    suffix: None or sequence of str
        None to derive the suffixes from the names with `suffix_format`
    names: sequence of str
    suffix_format: str
        Format string with a single `{}`

    Returns
    -------
    list of str
    """
    names = list(names)
    if suffix is None:
        return [suffix_format.format(name) for name in names]
    if isinstance(suffix, str) or not isinstance(suffix, collections.abc.Iterable):
        raise TypeError('`suffix` should be None or a sequence of str')
    suffix = [str(s) for s in suffix]
    if len(suffix) != len(names):
        raise ArgumentCountError('{} suffix(es) provided for {} item(s)'.format(
            len(suffix), len(names),
        ))
    if len(set(suffix)) != len(suffix):
        raise ValueError('Suffixes should be unique, found `{}`'.format(suffix))
    return suffix

def derive_path(path, suffix):
    """Insert `suffix` between the base and the extension of `path`

    >>> derive_path('out.tif', '_a')
    'out_a.tif'
    """
    base, ext = os.path.splitext(path)
    return base + suffix + ext
