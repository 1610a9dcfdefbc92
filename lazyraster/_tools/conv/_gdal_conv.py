"""Conversions between gdal flags and python representations

http://www.gdal.org/gdal_8h.html
"""

from osgeo import gdal

# Open flags ************************************************************************************ **
_OF_OF_MODE = {
    'r': gdal.OF_READONLY,
    'w': gdal.OF_UPDATE,
}

def of_of_mode(mode):
    """Convert a lazyraster opening mode to gdal open flags"""
    return _OF_OF_MODE[mode] | gdal.OF_RASTER | gdal.OF_VERBOSE_ERROR

# Metadata ************************************************************************************** **
def str_metadata(metadata):
    """Keep the items of a metadata mapping that gdal can store in a dataset's default domain"""
    return {
        str(k): str(v)
        for k, v in metadata.items()
        if isinstance(v, (str, int, float))
    }
