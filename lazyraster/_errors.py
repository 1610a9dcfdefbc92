"""Exceptions raised by lazyraster

Each exception also derives from the closest builtin exception, so that code catching
`FileNotFoundError` or `IndexError` keeps working.
"""

class LazyRasterError(Exception):
    """Base class of all the exceptions raised by lazyraster"""

class NotFoundError(LazyRasterError, FileNotFoundError):
    """The path to open does not exist"""

class BackendError(LazyRasterError):
    """The backend could not open or parse a path"""

class RasterIOError(LazyRasterError, OSError):
    """A read or a write failed on an already opened resource"""

class BoundsError(LazyRasterError, IndexError):
    """A block request exceeds the shape of an array"""

class UnsupportedFormatError(LazyRasterError, ValueError):
    """No backend is registered for a path's extension or for a tag"""

class MultipleResourcesError(LazyRasterError):
    """More than one file handle was found in a single wrapper tree"""

class ArgumentCountError(LazyRasterError, ValueError):
    """The number of suffixes does not match the number of items to write"""

class UseAfterCloseError(LazyRasterError, RuntimeError):
    """An operation was attempted on a closed resource"""
