#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings for LCP reading and writing.

This module centralizes the format constants and the default creation
options used across the codec modules, making it easier to modify settings
in one place.
"""
from typing import Dict, List, Union, Any, Tuple, Optional
import os
from pathlib import Path

import yaml

# Format constants
LCP_HEADER_SIZE: int = 7316
LCP_IDENTIFY_BYTES: int = 50
LCP_MAX_PATH: int = 256
LCP_MAX_DESC: int = 512
LCP_MAX_CLASSES: int = 100   # slots per band, leading 0 included
LCP_SUPPORTED_BAND_COUNTS: Tuple[int, ...] = (5, 7, 8, 10)
LCP_EXTENSION: str = "lcp"
LCP_PRJ_EXTENSION: str = "prj"

CROWN_GROUND_ABSENT: int = 20
CROWN_GROUND_PRESENT: int = 21

DEFAULT_NODATA_VALUE: int = -9999
INT16_MIN: int = -32768
INT16_MAX: int = 32767

# Reference geographic CRS for the header latitude (NAD83)
LATITUDE_REFERENCE_CRS: str = "EPSG:4269"

# Cursor positions the header encoder may land on after each region
STATS_REGION_CHECKPOINTS: Tuple[int, ...] = (2104, 3340, 4164)
FILENAME_REGION_CHECKPOINTS: Tuple[int, ...] = (5524, 6292, 6804)

# Path configuration
DEFAULT_OUTPUT_DIR: Path = Path(os.environ.get("LCP_OUTPUT_DIR", Path.cwd() / "output"))

# Creation options and their defaults
CREATION_OPTION_DEFAULTS: Dict[str, Any] = {
    "ELEVATION_UNIT": "METERS",
    "SLOPE_UNIT": "DEGREES",
    "ASPECT_UNIT": "AZIMUTH_DEGREES",
    "FUEL_MODEL_OPTION": "NO_CUSTOM_AND_NO_FILE",
    "CANOPY_COV_UNIT": "PERCENT",
    "CANOPY_HT_UNIT": "METERS_X_10",   # crown fuels only
    "CBH_UNIT": "METERS_X_10",         # crown fuels only
    "CBD_UNIT": "KG_PER_CUBIC_METER_X_100",  # crown fuels only
    "DUFF_UNIT": "MG_PER_HECTARE_X_10",      # ground fuels only
    "CALCULATE_STATS": True,
    "CLASSIFY_DATA": True,
    "LINEAR_UNIT": "SET_FROM_SRS",
    "LATITUDE": None,  # computed from the source CRS when unset
    "DESCRIPTION": "LCP file created by landscape-lcp.",
}

# Export configuration
EXPORT_CONFIG: Dict[str, Any] = {
    "default_format": "json",    # Options: 'json', 'yaml'
    "indent": 2,
}

# Logging configuration
LOGGING_CONFIG: Dict[str, Any] = {
    "level": os.environ.get("LCP_LOG_LEVEL", "INFO"),  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_to_file": False,
    "log_file": DEFAULT_OUTPUT_DIR / "landscape_lcp.log",
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

_TRUE_STRINGS = ("YES", "TRUE", "ON", "1", "Y")
_FALSE_STRINGS = ("NO", "FALSE", "OFF", "0", "N")


def parse_bool(value: Union[str, bool, int, None], default: bool) -> bool:
    """
    Interpret a boolean creation option.

    Parameters
    ----------
    value : str, bool, int or None
        Raw option value. None means "not set".
    default : bool
        Value returned when the option is not set.

    Returns
    -------
    bool
        Parsed value.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().upper()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    # Unrecognized strings count as true
    return True


def normalize_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a copy of ``options`` with upper-cased keys."""
    if not options:
        return {}
    return {str(key).upper(): value for key, value in options.items()}


def parse_option_list(items: Optional[List[str]]) -> Dict[str, str]:
    """
    Parse ``KEY=VALUE`` strings into an options dictionary.

    Parameters
    ----------
    items : list of str, optional
        Strings such as ``"ELEVATION_UNIT=FEET"``.

    Returns
    -------
    dict
        Upper-cased keys mapped to their raw string values.
    """
    options: Dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise ValueError(f"Creation option must be KEY=VALUE, got: {item}")
        key, value = item.split("=", 1)
        options[key.strip().upper()] = value.strip()
    return options


def load_creation_options(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load creation options from a YAML mapping.

    Parameters
    ----------
    path : str or Path
        Path to a YAML file whose top level is a mapping of option names
        to values.

    Returns
    -------
    dict
        Options with upper-cased keys.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Creation options file must contain a mapping: {path}")
    return normalize_options(data)
