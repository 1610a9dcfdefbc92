"""Conversions between numpy dtypes and gdal GDTs

All types are not available with all gdal versions, hence the `_eval_filter_dict_key({`
declarations.
"""

from osgeo import gdal
import numpy as np

def _gdt(name):
    return getattr(gdal, name, None)

def _eval_filter_dict_key(d):
    return {
        np.dtype(k): v
        for (k, v) in d.items()
        if v is not None
    }

def _eval_filter_dict_value(d):
    return {
        k: np.dtype(v)
        for (k, v) in d.items()
        if k is not None
    }

# DTYPE -> GDT CONVERSIONS ********** **
_GDT_OF_DTYPE_EQUIV = _eval_filter_dict_key({
    'uint8': _gdt('GDT_Byte'),
    'int8': _gdt('GDT_Int8'),
    'int16': _gdt('GDT_Int16'),
    'uint16': _gdt('GDT_UInt16'),
    'int32': _gdt('GDT_Int32'),
    'uint32': _gdt('GDT_UInt32'),
    'int64': _gdt('GDT_Int64'),
    'uint64': _gdt('GDT_UInt64'),
    'float32': _gdt('GDT_Float32'),
    'float64': _gdt('GDT_Float64'),
    'complex64': _gdt('GDT_CFloat32'),
    'complex128': _gdt('GDT_CFloat64'),
})

_GDT_OF_DTYPE_UPCAST = _eval_filter_dict_key({
    'bool': _gdt('GDT_Byte'),
    'float16': _gdt('GDT_Float32'), # 16 to 32 bits
})

# GDT -> DTYPE CONVERSIONS ********** **
_DTYPE_OF_GDT_EQUIV = _eval_filter_dict_value({
    v: k.name for k, v in _GDT_OF_DTYPE_EQUIV.items()
})

_DTYPE_OF_GDT_UPCAST = _eval_filter_dict_value({
    _gdt('GDT_CInt16'): 'complex64', # 16 to 24 bits
    _gdt('GDT_CInt32'): 'complex128', # 32 to 53 bits
})

# PUBLIC **************************** **
def gdt_of_dtype(dtype):
    """
    Convert a dtype (numpy data type) to an equivalent or larger GDT (GDAL type).
    If impossible an exception is raised.
    """
    dtype = np.dtype(dtype)
    gdt = _GDT_OF_DTYPE_EQUIV.get(dtype)
    if gdt is None:
        gdt = _GDT_OF_DTYPE_UPCAST.get(dtype)
    if gdt is None:
        raise ValueError('`{}` has no equivalent or upcast gdt'.format(dtype))
    return gdt

def dtype_of_gdt(gdt):
    """
    Convert a GDT (GDAL type) to an equivalent or larger dtype (numpy data type).
    If impossible an exception is raised.
    """
    dtype = _DTYPE_OF_GDT_EQUIV.get(gdt)
    if dtype is None:
        dtype = _DTYPE_OF_GDT_UPCAST.get(gdt)
    if dtype is None:
        raise ValueError('`{}` has no equivalent or upcast dtype'.format(
            gdal.GetDataTypeName(gdt)
        ))
    return dtype
