from lazyraster._payload import APayload
from lazyraster._file_handle import FileHandle

class LazyArray(APayload):
    """Payload backed by a file, the data is only read when a block is requested.

    The shape, dtype, missing value, metadata and dims are read once at construction and cached,
    querying them never touches the disk.

    `handle` is a FileHandle, that is opened for the duration of each `read_block` and
    `write_block`. Within a `lazyraster.with_open` session the handle is replaced by the opened
    AResource, that is then reused by all calls.

    >>> help(lazyraster.with_open)
    """

    _structural_fields = ('handle',)

    def __init__(self, handle, shape, dtype, missing_value=None, metadata=None, dims=None):
        self._handle = handle
        self._shape = tuple(shape)
        self._dtype = dtype
        self._missing_value = missing_value
        self._metadata = {} if metadata is None else metadata
        self._dims = dims

    @classmethod
    def from_path(cls, path, key=None, mode='r'):
        """Open `path` once to read its metadata and return a LazyArray on it"""
        return cls.from_handle(FileHandle(path, key, mode))

    @classmethod
    def from_handle(cls, handle):
        with handle.acquire() as resource:
            return cls(
                handle,
                shape=resource.shape,
                dtype=resource.dtype,
                missing_value=resource.missing_value,
                metadata=resource.metadata,
                dims=resource.dims,
            )

    @property
    def handle(self):
        """FileHandle, or AResource within a session"""
        return self._handle

    @property
    def path(self):
        return self._handle.path

    @property
    def shape(self):
        return self._shape

    @property
    def dtype(self):
        return self._dtype

    @property
    def missing_value(self):
        return self._missing_value

    @property
    def metadata(self):
        return self._metadata

    @property
    def dims(self):
        return self._dims

    @property
    def is_disk(self):
        return True

    def read_block(self, block):
        with self._handle.acquire() as resource:
            return resource.read_block(block)

    def write_block(self, block, array):
        with self._handle.acquire() as resource:
            resource.write_block(block, array)

    def rebuild(self, handle=None):
        if handle is None:
            return self
        return LazyArray(
            handle, self._shape, self._dtype, self._missing_value, self._metadata, self._dims,
        )

    def __eq__(self, other):
        if not isinstance(other, LazyArray):
            return NotImplemented
        return (
            self._handle == other._handle and
            self._shape == other._shape and
            self._dtype == other._dtype
        )

    def __hash__(self):
        return hash((self._handle, self._shape))

    def __repr__(self):
        return '<LazyArray {!r} shape={} dtype={}>'.format(self._handle, self._shape, self._dtype)
