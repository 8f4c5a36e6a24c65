#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LCP file writer.

This module creates an LCP file from any ``RasterSource``. Creation runs in
ordered phases: validation, unit resolution, georeferencing, statistics and
classification, header, pixels and finally the ``.prj`` sidecar. Nothing
is written to disk until the first four phases have succeeded.

A cancelled or failed pixel copy leaves the partially written file in
place; callers that need all-or-nothing output must remove it themselves.
"""
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from landscape_lcp.core.config import (
    CREATION_OPTION_DEFAULTS, LCP_SUPPORTED_BAND_COUNTS, normalize_options, parse_bool,
)
from landscape_lcp.core.exceptions import (
    CancelledError, LcpError, LcpIOError, UnsupportedSchemaError,
)
from landscape_lcp.core.io import RasterSource, band_min_max, coerce_int16, write_prj
from landscape_lcp.core.logging_config import get_module_logger
from landscape_lcp.format.classify import classify_band
from landscape_lcp.format.georef import (
    header_latitude, resolve_latitude, resolve_linear_unit,
)
from landscape_lcp.format.header import BandInfo, LcpHeader, encode_header
from landscape_lcp.format.layout import (
    BandRole, CROWN_ROLES, GROUND_ROLES, fuels_flag, schema_from_band_count, schema_roles,
)
from landscape_lcp.format.units import (
    ABSENT_ROLE_CODES, coarse_woody_option, default_unit_option, option_key, resolve_unit,
)
from landscape_lcp.reader import LcpDataset, open_lcp
from landscape_lcp.utils.utils import ProgressCallback, no_progress

# Initialize logger
logger = get_module_logger(__name__)


def validate_source(source: RasterSource, strict: bool) -> Tuple[bool, bool]:
    """
    Check that a source can be stored as LCP.

    Parameters
    ----------
    source : RasterSource
        Source raster.
    strict : bool
        Reject non-int16 sources instead of converting them.

    Returns
    -------
    tuple
        ``(has_crown, has_ground)`` schema derived from the band count.

    Raises
    ------
    UnsupportedSchemaError
        If the band count is not 5, 7, 8 or 10, or the pixel type is not
        int16 in strict mode.
    """
    if source.count not in LCP_SUPPORTED_BAND_COUNTS:
        raise UnsupportedSchemaError(
            f"LCP driver doesn't support {source.count} bands. "
            f"Must be 5, 7, 8 or 10 bands."
        )

    if np.dtype(source.dtype) != np.int16:
        if strict:
            raise UnsupportedSchemaError(
                "LCP only supports 16-bit signed integer data types."
            )
        logger.warning(f"Source data type is {np.dtype(source.dtype).name}; "
                       f"setting data type to 16-bit integer.")

    return schema_from_band_count(source.count)


def resolve_band_units(options: Dict[str, Any],
                       has_crown: bool,
                       has_ground: bool) -> Dict[BandRole, int]:
    """
    Resolve the unit code of every header slot.

    Roles outside the schema keep their fixed placeholder codes and their
    options are ignored. The coarse woody debris option follows the
    presence of ground fuels.

    Returns
    -------
    dict
        Unit code for each of the ten roles.
    """
    codes: Dict[BandRole, int] = dict(ABSENT_ROLE_CODES)
    for role in schema_roles(has_crown, has_ground):
        if role == BandRole.COARSE_WOODY_DEBRIS:
            continue
        value = options.get(option_key(role))
        if value is None:
            value = default_unit_option(role)
        codes[role] = resolve_unit(role, value)
    codes[BandRole.COARSE_WOODY_DEBRIS] = coarse_woody_option(has_ground)
    return codes


def _warn_unknown_options(options: Dict[str, Any], has_crown: bool, has_ground: bool) -> None:
    for key in options:
        if key not in CREATION_OPTION_DEFAULTS:
            logger.warning(f"Ignoring unsupported creation option {key}")
    ignored: List[BandRole] = []
    if not has_crown:
        ignored.extend(CROWN_ROLES)
    if not has_ground:
        ignored.extend(GROUND_ROLES)
    for role in ignored:
        key = option_key(role)
        if key in options:
            logger.warning(f"Ignoring {key}: the source has no band for it")


def compute_band_info(source: RasterSource,
                      roles: List[BandRole],
                      calculate_stats: bool,
                      classify: bool) -> Dict[BandRole, Tuple[int, int, int, Tuple[int, ...]]]:
    """
    Compute min, max and classes for every band.

    Parameters
    ----------
    source : RasterSource
        Source raster.
    roles : list of BandRole
        Role of bands 1..N.
    calculate_stats : bool
        Compute min/max; when False every band gets zeros.
    classify : bool
        Enumerate distinct values; when False ``num_classes`` is -1.

    Returns
    -------
    dict
        ``role -> (minimum, maximum, num_classes, class_values)``.
    """
    results: Dict[BandRole, Tuple[int, int, int, Tuple[int, ...]]] = {}
    for index, role in enumerate(roles, start=1):
        if not calculate_stats:
            results[role] = (0, 0, 0, (0,))
            continue

        minimum = maximum = 0
        num_classes, class_values = -1, ()

        try:
            stats = band_min_max(source, index)
        except LcpIOError as e:
            logger.warning(f"Failed to read band {index} while computing statistics: {e}")
            stats = None
        if stats is None:
            logger.warning(f"Failed to properly calculate statistics on band {index}")
        else:
            minimum, maximum = int(stats[0]), int(stats[1])

        if classify:
            try:
                num_classes, class_values = classify_band(source, index)
            except LcpError as e:
                logger.warning(f"Failed to classify band data on band {index}: {e}")
                num_classes, class_values = 0, (0,)

        logger.debug(f"Band {index} ({role.name}): min={minimum} max={maximum} "
                     f"classes={num_classes}")
        results[role] = (minimum, maximum, num_classes, class_values)
    return results


def build_header(source: RasterSource,
                 has_crown: bool,
                 has_ground: bool,
                 unit_codes: Dict[BandRole, int],
                 latitude: int,
                 linear_unit: int,
                 band_stats: Dict[BandRole, Tuple[int, int, int, Tuple[int, ...]]],
                 description: str,
                 has_statistics: bool) -> LcpHeader:
    """Assemble the header of the new file from resolved values."""
    gt = source.geotransform
    file_name = source.file_list[0] if source.file_list else ""

    bands = {}
    for role in schema_roles(has_crown, has_ground):
        minimum, maximum, num_classes, class_values = band_stats[role]
        bands[role] = BandInfo(
            unit=unit_codes[role],
            minimum=minimum,
            maximum=maximum,
            num_classes=num_classes,
            class_values=tuple(class_values),
            file_name=file_name,
        )

    return LcpHeader(
        crown_fuels=fuels_flag(has_crown),
        ground_fuels=fuels_flag(has_ground),
        latitude=latitude,
        east=gt[0] + gt[1] * source.width,
        west=gt[0],
        north=gt[3],
        south=gt[3] + gt[5] * source.height,
        width=source.width,
        height=source.height,
        linear_unit=linear_unit,
        cell_x=gt[1],
        cell_y=abs(gt[5]),
        bands=bands,
        unit_codes=dict(unit_codes),
        description=description,
        has_statistics=has_statistics,
    )


def write_pixels(f, source: RasterSource, progress: ProgressCallback) -> None:
    """
    Stream interleaved little-endian int16 records row by row.

    Raises
    ------
    CancelledError
        If ``progress`` returns False.
    """
    if not progress(0.0):
        raise CancelledError("Copy cancelled before the first row")

    record = np.empty((source.width, source.count), dtype="<i2")
    for y in range(source.height):
        for band in range(1, source.count + 1):
            record[:, band - 1] = coerce_int16(np.asarray(source.read_row(band, y)))
        f.write(record.tobytes())

        if not progress((y + 1) / source.height):
            raise CancelledError(f"Copy cancelled after row {y + 1} of {source.height}")


def create_copy(path: Union[str, Path],
                source: RasterSource,
                options: Optional[Dict[str, Any]] = None,
                strict: bool = False,
                progress: Optional[ProgressCallback] = None) -> LcpDataset:
    """
    Create an LCP file from a raster source.

    Parameters
    ----------
    path : str or Path
        Destination ``.lcp`` path.
    source : RasterSource
        Source raster with 5, 7, 8 or 10 bands.
    options : dict, optional
        Creation options (ELEVATION_UNIT, LATITUDE, CLASSIFY_DATA, ...).
    strict : bool, optional
        Fail instead of converting or defaulting, by default False.
    progress : callable, optional
        Called with the completed fraction; returning False cancels.

    Returns
    -------
    LcpDataset
        The newly written file, reopened.

    Raises
    ------
    UnsupportedSchemaError, InvalidOptionError, GeoReferenceError
        Before any output is created.
    LcpIOError, CancelledError
        During the copy; a partial file is left on disk.
    """
    path = str(path)
    opts = normalize_options(options)
    progress = progress or no_progress

    # Phase 1: validate
    has_crown, has_ground = validate_source(source, strict)
    roles = schema_roles(has_crown, has_ground)
    _warn_unknown_options(opts, has_crown, has_ground)

    # Phase 2: units
    unit_codes = resolve_band_units(opts, has_crown, has_ground)

    # Phase 3: georeferencing
    latitude = resolve_latitude(opts.get("LATITUDE"), source.crs, source.geotransform,
                                source.height, source.width)
    linear_unit = resolve_linear_unit(opts.get("LINEAR_UNIT"), source.crs, strict)
    description = str(opts.get("DESCRIPTION", CREATION_OPTION_DEFAULTS["DESCRIPTION"]))

    # Phase 4: statistics and classification
    calculate_stats = parse_bool(opts.get("CALCULATE_STATS"),
                                 CREATION_OPTION_DEFAULTS["CALCULATE_STATS"])
    classify = parse_bool(opts.get("CLASSIFY_DATA"),
                          CREATION_OPTION_DEFAULTS["CLASSIFY_DATA"])
    if classify and not calculate_stats:
        logger.warning("Ignoring request to not calculate statistics, "
                       "because CLASSIFY_DATA was set to ON")
        calculate_stats = True

    band_stats = compute_band_info(source, roles, calculate_stats, classify)

    header = build_header(source, has_crown, has_ground, unit_codes,
                          header_latitude(latitude), linear_unit, band_stats,
                          description, calculate_stats)
    header_bytes = encode_header(header)

    # Phases 5 and 6: header and pixels
    logger.info(f"Writing {len(roles)}-band LCP {path} ({source.width}x{source.height})")
    try:
        with open(path, "wb") as f:
            f.write(header_bytes)
            write_pixels(f, source, progress)
    except OSError as e:
        raise LcpIOError(f"Unable to write lcp file {path}: {e}", e) from e

    # Phase 7: projection sidecar
    if source.crs is not None:
        write_prj(path, source.crs)

    return open_lcp(path, check_extension=False)
