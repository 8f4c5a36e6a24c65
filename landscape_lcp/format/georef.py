#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Georeferencing fields of the LCP header.

The header stores an integer reference latitude and a linear unit code.
Both can be given explicitly as creation options or derived from the
source's spatial reference.
"""
import math
from typing import Any, Optional, Tuple

from rasterio.crs import CRS
from rasterio.errors import CRSError
from rasterio.warp import transform as warp_transform

from landscape_lcp.core.config import LATITUDE_REFERENCE_CRS
from landscape_lcp.core.exceptions import GeoReferenceError, InvalidOptionError
from landscape_lcp.core.io import GeoTransform
from landscape_lcp.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)

LINEAR_UNIT_METERS = 0
LINEAR_UNIT_FEET = 1
LINEAR_UNIT_KILOMETERS = 2


def parse_latitude(value: Any) -> int:
    """
    Validate an explicit ``LATITUDE`` option.

    Raises
    ------
    InvalidOptionError
        If the value is not a number in [-90, 90].
    """
    try:
        latitude = int(float(str(value).strip()))
    except ValueError as e:
        raise InvalidOptionError(f"Invalid value ({value}) for LATITUDE.", e) from e
    if latitude > 90 or latitude < -90:
        raise InvalidOptionError(f"Invalid value ({latitude}) for LATITUDE.")
    return latitude


def raster_center(geotransform: GeoTransform, width: int, height: int) -> Tuple[float, float]:
    """Georeferenced coordinates of the raster center."""
    gt = geotransform
    x = gt[0] + gt[1] * width / 2 + gt[2] * height / 2
    y = gt[3] + gt[4] * width / 2 + gt[5] * height / 2
    return x, y


def resolve_latitude(explicit: Any,
                     crs: Optional[CRS],
                     geotransform: GeoTransform,
                     height: int,
                     width: int) -> float:
    """
    Determine the reference latitude for the header.

    Parameters
    ----------
    explicit : int, str or None
        Value of the ``LATITUDE`` creation option.
    crs : CRS, optional
        Spatial reference of the source.
    geotransform : tuple
        GDAL-style geotransform of the source.
    height, width : int
        Raster size in pixels.

    Returns
    -------
    float
        Latitude in degrees (NAD83 when derived from the CRS).

    Raises
    ------
    InvalidOptionError
        If the explicit value is out of range.
    GeoReferenceError
        If no explicit value is given and the CRS is missing or the center
        cannot be reprojected.
    """
    if explicit is not None and str(explicit).strip() != "":
        return float(parse_latitude(explicit))

    if crs is None:
        raise GeoReferenceError(
            "Could not calculate latitude from spatial reference and LATITUDE was not set."
        )

    x, y = raster_center(geotransform, width, height)
    try:
        _, lats = warp_transform(crs, LATITUDE_REFERENCE_CRS, [x], [y])
    except Exception as e:
        raise GeoReferenceError(
            "Could not calculate latitude from spatial reference and LATITUDE was not set.", e
        ) from e

    latitude = lats[0]
    if not math.isfinite(latitude) or latitude > 90 or latitude < -90:
        raise GeoReferenceError(
            f"Reprojected latitude {latitude} is invalid and LATITUDE was not set."
        )
    logger.debug(f"Latitude derived from spatial reference: {latitude:.4f}")
    return latitude


def header_latitude(latitude: float) -> int:
    """Integer latitude stored in the header."""
    return int(latitude + 0.5)


def _unit_code_from_option(option: str) -> Optional[int]:
    text = option.strip().upper()
    if text.startswith("METER") or text.startswith("METRE"):
        return LINEAR_UNIT_METERS
    if text in ("FOOT", "FEET"):
        return LINEAR_UNIT_FEET
    if text.startswith("KILOMET"):
        return LINEAR_UNIT_KILOMETERS
    return None


def _unit_code_from_crs_name(name: str) -> Optional[int]:
    text = name.strip().lower()
    if text in ("meter", "metre"):
        return LINEAR_UNIT_METERS
    if text in ("feet", "foot"):
        return LINEAR_UNIT_FEET
    if text.startswith("kilomet"):
        return LINEAR_UNIT_KILOMETERS
    return None


def resolve_linear_unit(option: Optional[str], crs: Optional[CRS], strict: bool) -> int:
    """
    Determine the header linear unit code.

    Parameters
    ----------
    option : str, optional
        ``LINEAR_UNIT`` creation option; None or ``SET_FROM_SRS`` derives
        the unit from ``crs``.
    crs : CRS, optional
        Spatial reference of the source.
    strict : bool
        Fail instead of defaulting to meters when the unit is unusable.

    Returns
    -------
    int
        0 for meters, 1 for feet, 2 for kilometers.

    Raises
    ------
    InvalidOptionError
        If ``option`` names an unknown unit.
    GeoReferenceError
        In strict mode, if the unit cannot be derived or its scale is not 1.
    """
    if option is not None and str(option).strip().upper() != "SET_FROM_SRS":
        code = _unit_code_from_option(str(option))
        if code is None:
            raise InvalidOptionError(f"Invalid value ({option}) for LINEAR_UNIT.")
        return code

    if crs is None:
        message = ("Could not parse linear unit from spatial reference "
                   "and LINEAR_UNIT was not set")
        if strict:
            raise GeoReferenceError(message + ".")
        logger.warning(message + ", defaulting to meters.")
        return LINEAR_UNIT_METERS

    try:
        name, scale = crs.linear_units_factor
    except CRSError:
        name, scale = None, None

    if not name:
        if strict:
            raise GeoReferenceError("Could not parse linear unit.")
        logger.warning("Could not parse linear unit, using meters")
        return LINEAR_UNIT_METERS

    logger.debug(f"Setting linear unit to {name}")
    code = _unit_code_from_crs_name(name)
    if code is None:
        logger.warning(f"Unsupported linear unit '{name}', using meters")
        code = LINEAR_UNIT_METERS

    if scale is not None and float(scale) != 1.0:
        if strict:
            raise GeoReferenceError(f"Unit scale is {float(scale):f} (!=1.0). It is not supported.")
        logger.warning(f"Unit scale is {float(scale):f} (!=1.0). It is not supported, ignoring.")

    return code
