import os

from setuptools import setup, find_packages

# Requirements
# https://caremad.io/posts/2013/07/setup-vs-requirement/
reqs = [
    'numpy>=1.24',
    'gdal>=3.4',
    'affine>=2.0.0',
    'zarr>=3.0.0',
]

extras = {
    'test': ['pytest>=7'],
}

readme_path = os.path.join(
    os.path.dirname(os.path.abspath(__file__)),
    'README.md'
)
readme = open(readme_path, 'rb').read().decode("UTF-8")

# Classifiers
# https://pypi.python.org/pypi?%3Aaction=list_classifiers
classifiers = [
    'Development Status :: 3 - Alpha',
    'Intended Audience :: Developers',
    'Intended Audience :: Science/Research',
    'License :: OSI Approved :: Apache Software License',
    'Operating System :: OS Independent',
    'Programming Language :: Python :: 3',
    'Programming Language :: Python :: 3.11',
    'Programming Language :: Python :: 3.12',
    'Topic :: Scientific/Engineering :: GIS',
]

setup(
    name='lazyraster',
    version='0.1.0',
    license='Apache License 2.0',
    description='Lazy file backed rasters with scoped resource opening',
    long_description=readme,
    long_description_content_type='text/markdown',
    classifiers=classifiers,
    keywords=['gdal gis raster zarr tif lazy'],
    packages=find_packages(),
    install_requires=reqs,
    extras_require=extras,
    python_requires='>=3.11',
)
