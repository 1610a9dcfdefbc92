import os

from lazyraster._errors import UnsupportedFormatError, RasterIOError
from lazyraster._env import env

class ABackend(object):
    """Base abstract class defining the capabilities of a file format backend.

    A backend is stateless, it is instanciated once by the backend registry.

    Features Defined
    ----------------
    - Has a `tag` and a list of `extensions` (lower case, with the leading dot)
    - `open` a path to obtain an AResource
    - `write_single` to write one Raster
    - `write_composite` to write a whole RasterStack at once, if `supports_composite_write`
    - `layer_keys` to list the layers of a multi-layer source
    """

    tag = None
    extensions = ()
    supports_composite_write = False

    def open(self, path, key, mode): # pragma: no cover
        """Open the resource at `path`

        Parameters
        ----------
        path: str
            Existing path
        key: None or str
            Layer to select in a multi-layer source
        mode: one of {'r', 'w'}

        Returns
        -------
        AResource
        """
        raise NotImplementedError('ABackend.open is virtual pure')

    def write_single(self, path, raster): # pragma: no cover
        """Create (or overwrite) `path` with the content of `raster`.

        `raster` is provided by the write dispatcher, if it is file backed its resource is opened.
        """
        raise NotImplementedError('ABackend.write_single is virtual pure')

    def write_composite(self, path, stack):
        """Create (or overwrite) `path` with all the layers of `stack`"""
        raise UnsupportedFormatError('Backend `{}` cannot write several layers to a file'.format(
            self.tag
        ))

    def layer_keys(self, path):
        """List the keys of the layers available at `path`. `[None]` for single layer sources."""
        return [None]

    # Helpers for subclasses ******************************************************************** **
    def _prepare_target(self, path, remove):
        """Check that `path` can be created, remove the existing file with `remove(path)` if
        overwriting is allowed (see `lazyraster.Env`)."""
        if not os.path.exists(path):
            return
        if not env.overwrite:
            raise RasterIOError("Can't create `{}` with `overwrite=False` because it exists".format(
                path,
            ))
        remove(path)

    def __repr__(self):
        return '<{} tag={} extensions={}>'.format(
            self.__class__.__name__, self.tag, list(self.extensions),
        )
