#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Band classification for the LCP header.

The header carries, per band, the list of distinct sample values when there
are at most 99 of them. These are legacy fields kept for FARSITE/FlamMap
display; they are computed here with a presence bitmap over the full int16
range.
"""
from typing import Tuple

import numpy as np

from landscape_lcp.core.config import DEFAULT_NODATA_VALUE, LCP_MAX_CLASSES, INT16_MIN
from landscape_lcp.core.io import RasterSource, coerce_int16
from landscape_lcp.core.logging_config import get_module_logger
from landscape_lcp.utils.utils import timer

# Initialize logger
logger = get_module_logger(__name__)

MAX_DISTINCT_VALUES = LCP_MAX_CLASSES - 1
TOO_MANY_CLASSES = -1

# Maps [-32768, 32767] onto [0, 65535]
_OFFSET = -INT16_MIN
_RANGE = 65536


@timer
def classify_band(source: RasterSource, band: int) -> Tuple[int, Tuple[int, ...]]:
    """
    Enumerate the distinct non-nodata values of a band.

    Parameters
    ----------
    source : RasterSource
        Source to scan row by row.
    band : int
        1-based band index.

    Returns
    -------
    tuple
        ``(num_classes, class_values)``. When the band holds at most 99
        distinct values, ``class_values`` is those values in ascending
        order with a leading 0 and ``num_classes`` is their count.
        Otherwise ``num_classes`` is -1 and ``class_values`` is empty.
    """
    flags = np.zeros(_RANGE, dtype=bool)
    found = 0

    for row in source.iter_rows(band):
        values = coerce_int16(np.asarray(row))
        values = values[values != DEFAULT_NODATA_VALUE]
        if values.size == 0:
            continue
        index = np.unique(values.astype(np.int32) + _OFFSET)
        new = index[~flags[index]]
        if found + new.size > MAX_DISTINCT_VALUES:
            logger.debug(f"Found more than {MAX_DISTINCT_VALUES} unique values in "
                         f"band {band}. Not classifying the data.")
            return TOO_MANY_CLASSES, ()
        flags[new] = True
        found += new.size

    # Leading 0 is a format convention, not a class
    classes = np.flatnonzero(flags) - _OFFSET
    return found, (0,) + tuple(int(v) for v in classes)
