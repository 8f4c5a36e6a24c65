#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LCP driver descriptor.

Bundles the identify/open/create entry points and the creation option list
so a host application can register the format in its own registry. The
package keeps no registry of its own.
"""
from typing import Any, Callable, Dict, List, MutableMapping, NamedTuple, Optional

from landscape_lcp.core.config import CREATION_OPTION_DEFAULTS, LCP_EXTENSION
from landscape_lcp.format.header import identify
from landscape_lcp.format.layout import BandRole
from landscape_lcp.format.units import option_key, supported_unit_options
from landscape_lcp.reader import open_lcp
from landscape_lcp.writer import create_copy


class CreationOption(NamedTuple):
    name: str
    type: str
    default: Any
    values: Optional[List[str]] = None


class LcpDriver(NamedTuple):
    short_name: str
    long_name: str
    extension: str
    creation_data_types: List[str]
    creation_options: List[CreationOption]
    identify: Callable
    open: Callable
    create_copy: Callable


def creation_option_list() -> List[CreationOption]:
    """All creation options with their type, default and allowed values."""
    options = [
        CreationOption(option_key(role), "string-select",
                       CREATION_OPTION_DEFAULTS[option_key(role)],
                       supported_unit_options(role))
        for role in BandRole if role != BandRole.COARSE_WOODY_DEBRIS
    ]
    options.extend([
        CreationOption("CALCULATE_STATS", "boolean", CREATION_OPTION_DEFAULTS["CALCULATE_STATS"]),
        CreationOption("CLASSIFY_DATA", "boolean", CREATION_OPTION_DEFAULTS["CLASSIFY_DATA"]),
        CreationOption("LINEAR_UNIT", "string-select", CREATION_OPTION_DEFAULTS["LINEAR_UNIT"],
                       ["SET_FROM_SRS", "METER", "FOOT", "KILOMETER"]),
        CreationOption("LATITUDE", "int", CREATION_OPTION_DEFAULTS["LATITUDE"]),
        CreationOption("DESCRIPTION", "string", CREATION_OPTION_DEFAULTS["DESCRIPTION"]),
    ])
    return options


LCP_DRIVER = LcpDriver(
    short_name="LCP",
    long_name="FARSITE v.4 Landscape File (.lcp)",
    extension=LCP_EXTENSION,
    creation_data_types=["Int16"],
    creation_options=creation_option_list(),
    identify=identify,
    open=open_lcp,
    create_copy=create_copy,
)


def register_driver(registry: MutableMapping[str, LcpDriver]) -> LcpDriver:
    """
    Register the LCP driver in a host registry keyed by short name.

    An existing ``"LCP"`` entry is left untouched.

    Returns
    -------
    LcpDriver
        The registered (or already present) driver.
    """
    if LCP_DRIVER.short_name not in registry:
        registry[LCP_DRIVER.short_name] = LCP_DRIVER
    return registry[LCP_DRIVER.short_name]


def driver_info() -> Dict[str, Any]:
    """Plain dictionary description of the driver, for display."""
    return {
        "short_name": LCP_DRIVER.short_name,
        "long_name": LCP_DRIVER.long_name,
        "extension": LCP_DRIVER.extension,
        "creation_data_types": list(LCP_DRIVER.creation_data_types),
        "creation_options": [option._asdict() for option in LCP_DRIVER.creation_options],
    }
