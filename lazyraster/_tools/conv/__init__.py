"""Conversions between gdal objects and python objects"""

from ._gdal_gdt_conv import gdt_of_dtype, dtype_of_gdt
from ._gdal_conv import of_of_mode, str_metadata
