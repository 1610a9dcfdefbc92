""">>> help(lazyraster.env)
>>> help(lazyraster.Env)
"""

import threading
import functools
from collections import namedtuple, ChainMap

from lazyraster._tools import Singleton

# Sanitization ********************************************************************************** **
def _sanitize_suffix_format(val):
    val = str(val)
    try:
        a, b = val.format('a'), val.format('b')
    except (IndexError, KeyError) as e:
        raise ValueError('`suffix_format` should contain a single `{{}}`, not `{}`'.format(val)) from e
    if a == b:
        raise ValueError('`suffix_format` should contain a single `{{}}`, not `{}`'.format(val))
    return val

def _sanitize_gdal_options(val):
    if isinstance(val, str):
        raise TypeError('`gdal_options` should be a sequence of str, like `["COMPRESS=DEFLATE"]`')
    return tuple(str(v) for v in val)

# Options declaration *************************************************************************** **
_Option = namedtuple('_Option', 'sanitize, default')
_OPTIONS = {
    'overwrite': _Option(bool, True),
    'suffix_format': _Option(_sanitize_suffix_format, '_{}'),
    'gdal_options': _Option(_sanitize_gdal_options, ()),
}

# Storage *************************************************************************************** **
# The main thread's stack, other threads start from a copy of it
_MAIN_STACK = ChainMap({
    k: opt.sanitize(opt.default)
    for k, opt in _OPTIONS.items()
})

class _Storage(threading.local):
    """Thread local stack of option mappings, the top of the stack is `stack.maps[0]`"""

    def __init__(self):
        if threading.current_thread() is threading.main_thread():
            self.stack = _MAIN_STACK
        else:
            self.stack = ChainMap(*[dict(m) for m in _MAIN_STACK.maps])
        super(_Storage, self).__init__()

_LOCAL = _Storage()

# Env update ************************************************************************************ **
class Env(object):
    """Context manager to update lazyraster's states. Can also be used as a decorator.

    The states are thread local, a new thread starts with the states of the main thread.

    Parameters
    ----------
    overwrite: bool
        Whether writing a raster may replace an existing file
        Initialized to `True`
    suffix_format: str
        Format of the suffix inserted before the extension when the items of a RasterStack are
        written to separate files. Should contain a single `{}` that receives the item's name.
        Initialized to `'_{}'`
    gdal_options: sequence of str
        Creation options passed to gdal when creating a file
        Initialized to `()`

    Examples
    --------
    >>> import lazyraster as lr
    >>> with lr.Env(suffix_format='-{}'):
    ...     stack.write('out.tif')
    ... # out-a.tif, out-b.tif...

    >>> @lr.Env(gdal_options=['COMPRESS=DEFLATE'])
    ... def main():
    ...     lr.write('dem.tif', dem)

    """

    def __init__(self, **kwargs):
        unknown = set(kwargs) - set(_OPTIONS)
        if unknown:
            raise ValueError('Unknown env key `{}`'.format(unknown.pop()))
        self._mapping = {
            k: _OPTIONS[k].sanitize(v)
            for k, v in kwargs.items()
        }

    def __enter__(self):
        _LOCAL.stack.maps.insert(0, self._mapping)

    def __exit__(self, exc_type=None, exc_val=None, exc_tb=None):
        _LOCAL.stack.maps.pop(0)

    def __call__(self, fn):
        if not callable(fn): # pragma: no cover
            raise ValueError("An Env instance can only be called to decorate a function.")
        @functools.wraps(fn)
        def f(*args, **kwargs):
            with self:
                return fn(*args, **kwargs)
        return f

# Value retrieval ******************************************************************************* **
def _getter(key):
    def _get(_):
        return _LOCAL.stack[key]
    return _get

class _CurrentEnv(Singleton):
    """Namespace to access current values of lazyraster's environment variable (see lr.Env)

    Example
    -------
    >>> lr.env.suffix_format
    '_{}'

    """
    pass

for _key in _OPTIONS:
    setattr(_CurrentEnv, _key, property(_getter(_key)))

env = _CurrentEnv() # pylint: disable=invalid-name
