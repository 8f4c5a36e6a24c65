#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Input/output handling for LCP creation.

This module wraps the raster sources an LCP can be created from (any
rasterio-readable file, or an in-memory numpy array) behind a small
row-oriented interface, and handles the ``.prj`` projection sidecar.
"""
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import numpy as np
import rasterio
from rasterio.crs import CRS
from rasterio.enums import WktVersion
from rasterio.errors import CRSError, RasterioIOError
from rasterio.windows import Window

from landscape_lcp.core.config import (
    DEFAULT_NODATA_VALUE, INT16_MIN, INT16_MAX, LCP_PRJ_EXTENSION
)
from landscape_lcp.core.exceptions import LcpIOError
from landscape_lcp.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)

GeoTransform = Tuple[float, float, float, float, float, float]


class RasterSource:
    """
    Row-oriented read access to a multi-band raster.

    Subclasses provide ``width``, ``height``, ``count``, ``dtype``, ``crs``,
    ``geotransform``, ``nodata`` and ``file_list`` attributes and implement
    ``read_row``.
    """
    width: int
    height: int
    count: int
    dtype: np.dtype
    crs: Optional[CRS]
    geotransform: GeoTransform
    nodata: Optional[float]
    file_list: List[str]

    def read_row(self, band: int, y: int) -> np.ndarray:
        """Return row ``y`` of 1-based ``band`` as a 1D array."""
        raise NotImplementedError

    def iter_rows(self, band: int) -> Iterator[np.ndarray]:
        for y in range(self.height):
            yield self.read_row(band, y)


class ArraySource(RasterSource):
    """
    In-memory raster source backed by a ``(bands, rows, cols)`` array.

    Parameters
    ----------
    data : np.ndarray
        3D array of band samples.
    geotransform : tuple, optional
        GDAL-style geotransform, by default a 1 unit grid at the origin.
    crs : CRS or str, optional
        Spatial reference of the grid.
    nodata : float, optional
        Nodata value, by default -9999.
    """

    def __init__(self,
                 data: np.ndarray,
                 geotransform: Optional[GeoTransform] = None,
                 crs: Union[CRS, str, None] = None,
                 nodata: Optional[float] = DEFAULT_NODATA_VALUE):
        if data.ndim != 3:
            raise ValueError("ArraySource data must be (bands, rows, cols)")
        self.data = data
        self.count, self.height, self.width = data.shape
        self.dtype = data.dtype
        self.geotransform = tuple(geotransform) if geotransform else (0.0, 1.0, 0.0, 0.0, 0.0, -1.0)
        self.crs = CRS.from_user_input(crs) if crs is not None else None
        self.nodata = nodata
        self.file_list: List[str] = []

    def read_row(self, band: int, y: int) -> np.ndarray:
        return self.data[band - 1, y, :]


class RasterioSource(RasterSource):
    """Raster source reading rows from an open rasterio dataset."""

    def __init__(self, dataset: "rasterio.io.DatasetReader"):
        self._ds = dataset
        self.width = dataset.width
        self.height = dataset.height
        self.count = dataset.count
        self.dtype = np.dtype(dataset.dtypes[0])
        self.crs = dataset.crs
        self.geotransform = tuple(dataset.transform.to_gdal())
        self.nodata = dataset.nodata
        self.file_list = list(dataset.files)

    def read_row(self, band: int, y: int) -> np.ndarray:
        try:
            return self._ds.read(band, window=Window(0, y, self.width, 1))[0]
        except RasterioIOError as e:
            raise LcpIOError(f"Failed to read band {band} row {y}: {e}", e) from e


@contextmanager
def open_source(path: Union[str, Path]) -> Iterator[RasterioSource]:
    """
    Open a raster file as a ``RasterSource``.

    Parameters
    ----------
    path : str or Path
        Path to any raster rasterio can read.

    Yields
    ------
    RasterioSource
        Source that stays valid until the context exits.
    """
    logger.info(f"Opening source raster {path}")
    try:
        dataset = rasterio.open(path)
    except RasterioIOError as e:
        raise LcpIOError(f"Failed to open raster: {path}", e) from e

    with dataset:
        yield RasterioSource(dataset)


def coerce_int16(row: np.ndarray) -> np.ndarray:
    """
    Convert a row of samples to little-endian int16.

    Floating point samples are rounded; everything is clipped to the int16
    range before the cast.
    """
    if row.dtype == np.int16:
        return row.astype("<i2", copy=False)
    values = np.asarray(row, dtype=np.float64)
    if np.issubdtype(row.dtype, np.floating):
        values = np.rint(values)
        values = np.where(np.isnan(values), DEFAULT_NODATA_VALUE, values)
    return np.clip(values, INT16_MIN, INT16_MAX).astype("<i2")


def band_min_max(source: RasterSource, band: int) -> Optional[Tuple[float, float]]:
    """
    Compute the minimum and maximum of a band, ignoring its nodata value.

    Parameters
    ----------
    source : RasterSource
        Source to scan.
    band : int
        1-based band index.

    Returns
    -------
    tuple or None
        ``(min, max)``, or None when the band has no valid samples.
    """
    lo = np.inf
    hi = -np.inf
    nodata = source.nodata
    for row in source.iter_rows(band):
        values = np.asarray(row, dtype=np.float64)
        valid = np.isfinite(values)
        if nodata is not None:
            valid &= values != nodata
        if not valid.any():
            continue
        lo = min(lo, float(values[valid].min()))
        hi = max(hi, float(values[valid].max()))
    if not np.isfinite(lo):
        return None
    return lo, hi


def prj_path_for(path: Union[str, Path], extension: str = LCP_PRJ_EXTENSION) -> str:
    """Sidecar path sharing ``path``'s directory and basename."""
    base, _ = os.path.splitext(str(path))
    return f"{base}.{extension}"


def find_prj(path: Union[str, Path]) -> Optional[str]:
    """Locate ``<basename>.prj`` or ``<basename>.PRJ`` next to ``path``."""
    for extension in (LCP_PRJ_EXTENSION, LCP_PRJ_EXTENSION.upper()):
        candidate = prj_path_for(path, extension)
        if os.path.exists(candidate):
            return candidate
    return None


def read_prj(path: Union[str, Path]) -> Tuple[Optional[CRS], Optional[str]]:
    """
    Load the spatial reference from the sidecar of ``path``.

    Returns
    -------
    tuple
        ``(crs, prj_path)``. ``crs`` is None when there is no sidecar or it
        cannot be read or parsed.
    """
    prj = find_prj(path)
    if prj is None:
        return None, None

    try:
        with open(prj, "r", encoding="utf-8", errors="replace") as f:
            text = f.read().strip()
    except OSError as e:
        logger.warning(f"Could not read projection file {prj}: {e}")
        return None, prj
    logger.debug(f"Loaded SRS from {prj}")

    try:
        return CRS.from_wkt(text), prj
    except CRSError as e:
        logger.warning(f"Could not parse projection file {prj}: {e}")
        return None, prj


def write_prj(path: Union[str, Path], crs: CRS) -> Optional[str]:
    """
    Write ``crs`` as ESRI-flavored WKT next to ``path``.

    Failures are logged and reported by returning None.

    Returns
    -------
    str or None
        Path of the written sidecar.
    """
    prj = prj_path_for(path)
    try:
        wkt = crs.to_wkt(version=WktVersion.WKT1_ESRI)
    except CRSError as e:
        logger.error(f"Unable to export spatial reference as ESRI WKT: {e}")
        return None

    try:
        with open(prj, "w", encoding="utf-8") as f:
            f.write(wkt)
    except OSError as e:
        logger.error(f"Unable to create file {prj}: {e}")
        return None

    logger.info(f"Wrote projection sidecar {prj}")
    return prj
