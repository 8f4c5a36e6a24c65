#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Unit and option codes for LCP bands.

Each band role stores a 16-bit code describing the units of its samples
(or, for fuel models and coarse woody debris, an option flag). This module
maps the human-readable creation option strings to those codes and back.
"""
from typing import Dict, List, NamedTuple, Optional, Tuple

from landscape_lcp.core.config import CREATION_OPTION_DEFAULTS
from landscape_lcp.core.exceptions import InvalidOptionError
from landscape_lcp.format.layout import BandRole, ROLE_LAYOUTS


class UnitOption(NamedTuple):
    """One entry of a role's unit table."""
    code: int
    name: str                    # canonical option string
    aliases: Tuple[str, ...]     # other accepted spellings
    display: str                 # human-readable name for metadata


_HEIGHT_UNITS = (
    UnitOption(1, "METERS", ("METER",), "Meters"),
    UnitOption(2, "FEET", ("FOOT",), "Feet"),
    UnitOption(3, "METERS_X_10", ("METER_X_10",), "Meters x 10"),
    UnitOption(4, "FEET_X_10", ("FOOT_X_10",), "Feet x 10"),
)

UNIT_TABLES: Dict[BandRole, Tuple[UnitOption, ...]] = {
    BandRole.ELEVATION: (
        UnitOption(0, "METERS", ("METER",), "Meters"),
        UnitOption(1, "FEET", ("FOOT",), "Feet"),
    ),
    BandRole.SLOPE: (
        UnitOption(0, "DEGREES", (), "Degrees"),
        UnitOption(1, "PERCENT", (), "Percent"),
    ),
    BandRole.ASPECT: (
        UnitOption(0, "GRASS_CATEGORIES", (), "Grass categories"),
        UnitOption(1, "GRASS_DEGREES", (), "Grass degrees"),
        UnitOption(2, "AZIMUTH_DEGREES", (), "Azimuth degrees"),
    ),
    BandRole.FUEL_MODEL: (
        UnitOption(0, "NO_CUSTOM_AND_NO_FILE", (),
                   "no custom models AND no conversion file needed"),
        UnitOption(1, "CUSTOM_AND_NO_FILE", (),
                   "custom models BUT no conversion file needed"),
        UnitOption(2, "NO_CUSTOM_AND_FILE", (),
                   "no custom models BUT conversion file needed"),
        UnitOption(3, "CUSTOM_AND_FILE", (),
                   "custom models AND conversion file needed"),
    ),
    BandRole.CANOPY_COVER: (
        UnitOption(0, "CATEGORIES", (), "Categories (0-4)"),
        UnitOption(1, "PERCENT", (), "Percent"),
    ),
    BandRole.CANOPY_HEIGHT: _HEIGHT_UNITS,
    BandRole.CANOPY_BASE_HEIGHT: _HEIGHT_UNITS,
    BandRole.CANOPY_BULK_DENSITY: (
        UnitOption(1, "KG_PER_CUBIC_METER", (), "kg/m^3"),
        UnitOption(2, "POUND_PER_CUBIC_FOOT", (), "lb/ft^3"),
        UnitOption(3, "KG_PER_CUBIC_METER_X_100", (), "kg/m^3 x 100"),
        UnitOption(4, "POUND_PER_CUBIC_FOOT_X_1000", (), "lb/ft^3 x 1000"),
    ),
    BandRole.DUFF: (
        UnitOption(1, "MG_PER_HECTARE_X_10", (), "Mg/ha"),
        UnitOption(2, "TONS_PER_ACRE_X_10", (), "t/ac"),
    ),
    # Not user settable: derived from the presence of ground fuels
    BandRole.COARSE_WOODY_DEBRIS: (),
}

# Codes stored in slots of roles the schema does not carry
ABSENT_ROLE_CODES: Dict[BandRole, int] = {
    BandRole.CANOPY_HEIGHT: 3,
    BandRole.CANOPY_BASE_HEIGHT: 3,
    BandRole.CANOPY_BULK_DENSITY: 3,
    BandRole.DUFF: 1,
    BandRole.COARSE_WOODY_DEBRIS: 0,
}


def option_key(role: BandRole) -> str:
    """Creation option key for ``role``, e.g. ``"CBH_UNIT"``."""
    return ROLE_LAYOUTS[role].unit_key


def default_unit_option(role: BandRole) -> Optional[str]:
    """Default option string for ``role`` (None for coarse woody debris)."""
    return CREATION_OPTION_DEFAULTS.get(option_key(role))


def supported_unit_options(role: BandRole) -> List[str]:
    """Canonical option strings accepted for ``role``."""
    return [entry.name for entry in UNIT_TABLES[role]]


def resolve_unit(role: BandRole, option: str) -> int:
    """
    Map an option string to the 16-bit code stored for ``role``.

    Parameters
    ----------
    role : BandRole
        Band role whose table is consulted.
    option : str
        Option string, matched case-insensitively against canonical names
        and aliases.

    Returns
    -------
    int
        Unit/option code.

    Raises
    ------
    InvalidOptionError
        If ``option`` is not in the role's table.
    """
    text = str(option).strip().upper()
    for entry in UNIT_TABLES[role]:
        if text == entry.name or text in entry.aliases:
            return entry.code
    raise InvalidOptionError(
        f"Invalid value ({option}) for {option_key(role)}."
    )


def unit_option_name(role: BandRole, code: int) -> Optional[str]:
    """Canonical option string for ``code``, or None if the code is unknown."""
    for entry in UNIT_TABLES[role]:
        if entry.code == code:
            return entry.name
    return None


def unit_display_name(role: BandRole, code: int) -> Optional[str]:
    """Human-readable unit name for ``code``, or None if the code is unknown."""
    for entry in UNIT_TABLES[role]:
        if entry.code == code:
            return entry.display
    return None


def coarse_woody_option(has_ground_fuels: bool) -> int:
    """Coarse woody debris option code: 1 when ground fuels are present."""
    return 1 if has_ground_fuels else 0
