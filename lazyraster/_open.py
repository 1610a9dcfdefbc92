""">>> help(with_open)
>>> help(opened)
"""

import logging
import contextlib

from lazyraster._errors import MultipleResourcesError
from lazyraster._structure import flatten, reconstruct
from lazyraster._file_handle import FileHandle
from lazyraster import _tools

LOGGER = logging.getLogger(__name__)

@contextlib.contextmanager
def opened(raster, mode='r'):
    """Context manager opening the file nested anywhere inside `raster` for the duration of a
    with statement. This is the only place where a resource is kept open across several reads
    or writes.

    The value bound by the with statement is a copy of `raster` where the FileHandle was
    replaced by the opened resource, all other fields are shared with `raster`. The resource is
    closed on exit, even if an exception is raised. The opened copy must not be used after
    the with statement.

    Parameters
    ----------
    raster: Raster (or any AStructural)
    mode: one of {'r', 'w'}
        'w' to open the file in update mode

    Example
    -------
    >>> with lr.opened(lr.open_raster('dem.tif'), 'w') as dem:
    ...     dem[0:10, 0:10] = 0
    ...     dem[10:20, 0:10] = 1

    Caveat
    ------
    - If `raster` holds no FileHandle, it is used as is, even in 'w' mode.
    - If `raster` holds more than one FileHandle a `MultipleResourcesError` is raised and no file
      is opened.
    """
    mode = _tools.normalize_mode(mode)
    handles = flatten(raster, FileHandle)
    if len(handles) == 0:
        yield raster
        return
    if len(handles) > 1:
        raise MultipleResourcesError('Found {} files in a single raster: {}'.format(
            len(handles), [h.path for h in handles],
        ))
    handle, = handles

    resource = handle.open(mode)
    try:
        LOGGER.debug('Session started on `{}` (mode={})'.format(handle.path, mode))
        yield reconstruct(raster, [resource], FileHandle)
    finally:
        resource.close()
        LOGGER.debug('Session ended on `{}`'.format(handle.path))

def with_open(raster, operation, mode='r'):
    """Call `operation` on a copy of `raster` whose nested file is opened, and close the file
    afterward.

    Parameters
    ----------
    raster: Raster
    operation: callable
        Receives the opened Raster, its return value is returned. The exceptions it raises are
        propagated unchanged, after the file was closed.
    mode: one of {'r', 'w'}

    Example
    -------
    >>> lr.with_open(lr.open_raster('dem.tif'), lambda dem: dem[0, 0] + dem[-1, -1])

    >>> help(opened)
    """
    with opened(raster, mode) as opened_raster:
        return operation(opened_raster)
