"""Thread-safe capture of gdal errors

gdal reports a failure in several ways: by raising (if someone called `gdal.UseExceptions()`), by
calling the error handler of the current thread, by returning None, or by returning a nonzero
error code. `GDALErrorCatcher` folds all of them into a `(success, result_or_message)` pair.
"""

from osgeo import gdal

class GDALErrorCatcher(object):
    """Wrap a gdal callable

    Parameters
    ----------
    fn: callable
    none_is_error: bool
        For the functions returning None on failure (`gdal.OpenEx`, `gdal.GetDriverByName`)
    nonzero_int_is_error: bool
        For the functions returning an error code (`Driver.Delete`, `Band.WriteArray`)

    Example
    -------
    >>> success, res = GDALErrorCatcher(gdal.OpenEx, none_is_error=True)('dem.tif')
    >>> if not success:
    ...     print(res) # the error message
    """

    def __init__(self, fn, none_is_error=False, nonzero_int_is_error=False):
        self._fn = fn
        self._none_is_error = none_is_error
        self._nonzero_int_is_error = nonzero_int_is_error

    def __call__(self, *args, **kwargs):
        failures = []

        def _handler(err_level, err_no, err_msg):
            if err_level >= gdal.CE_Failure:
                failures.append('{} (code {})'.format(err_msg, err_no))

        res = None
        gdal.PushErrorHandler(_handler)
        try:
            res = self._fn(*args, **kwargs)
        except RuntimeError:
            # gdal exceptions are enabled, the handler received the message
            if not failures:
                raise
        finally:
            gdal.PopErrorHandler()

        if failures:
            return False, failures[-1]
        if self._none_is_error and res is None:
            return False, gdal.GetLastErrorMsg().strip() or 'unknown gdal error'
        if self._nonzero_int_is_error and isinstance(res, int) and res != 0:
            return False, 'gdal error code {}'.format(res)
        return True, res
