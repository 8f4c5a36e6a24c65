#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Declarative layout of the LCP header.

Every band role owns a fixed statistics slot, a unit code slot and a file
name slot whether or not the schema carries that role. Top-level scalar
fields live at fixed offsets as well. The schema (crown/ground fuel flags)
only decides which role slots are populated and in which logical order the
bands appear in the pixel records.
"""
from enum import IntEnum
from typing import Dict, List, NamedTuple, Tuple

from landscape_lcp.core.config import (
    CROWN_GROUND_ABSENT, CROWN_GROUND_PRESENT, LCP_MAX_CLASSES, LCP_MAX_PATH
)

STATS_REGION_START = 44
STATS_SLOT_SIZE = 12 + 4 * LCP_MAX_CLASSES  # min, max, num_classes, classes
UNIT_REGION_START = 4224
FILENAME_REGION_START = 4244
DESCRIPTION_OFFSET = 6804


class BandRole(IntEnum):
    """Semantic band roles, numbered by their fixed header slot."""
    ELEVATION = 0
    SLOPE = 1
    ASPECT = 2
    FUEL_MODEL = 3
    CANOPY_COVER = 4
    CANOPY_HEIGHT = 5
    CANOPY_BASE_HEIGHT = 6
    CANOPY_BULK_DENSITY = 7
    DUFF = 8
    COARSE_WOODY_DEBRIS = 9


class RoleLayout(NamedTuple):
    """Absolute offsets and naming of one band role."""
    role: BandRole
    key: str            # metadata key prefix, e.g. "CANOPY_HT"
    unit_key: str       # creation option / metadata key of the unit code
    description: str
    min_offset: int
    max_offset: int
    num_classes_offset: int
    classes_offset: int
    unit_offset: int
    file_name_offset: int


class ScalarField(NamedTuple):
    """A top-level header field: offset plus struct format."""
    offset: int
    fmt: str


def _role_layout(role: BandRole, key: str, unit_key: str, description: str) -> RoleLayout:
    stats = STATS_REGION_START + STATS_SLOT_SIZE * int(role)
    return RoleLayout(
        role=role,
        key=key,
        unit_key=unit_key,
        description=description,
        min_offset=stats,
        max_offset=stats + 4,
        num_classes_offset=stats + 8,
        classes_offset=stats + 12,
        unit_offset=UNIT_REGION_START + 2 * int(role),
        file_name_offset=FILENAME_REGION_START + LCP_MAX_PATH * int(role),
    )


ROLE_LAYOUTS: Dict[BandRole, RoleLayout] = {
    layout.role: layout for layout in (
        _role_layout(BandRole.ELEVATION, "ELEVATION", "ELEVATION_UNIT", "Elevation"),
        _role_layout(BandRole.SLOPE, "SLOPE", "SLOPE_UNIT", "Slope"),
        _role_layout(BandRole.ASPECT, "ASPECT", "ASPECT_UNIT", "Aspect"),
        _role_layout(BandRole.FUEL_MODEL, "FUEL_MODEL", "FUEL_MODEL_OPTION", "Fuel models"),
        _role_layout(BandRole.CANOPY_COVER, "CANOPY_COV", "CANOPY_COV_UNIT", "Canopy cover"),
        _role_layout(BandRole.CANOPY_HEIGHT, "CANOPY_HT", "CANOPY_HT_UNIT", "Canopy height"),
        _role_layout(BandRole.CANOPY_BASE_HEIGHT, "CBH", "CBH_UNIT", "Canopy base height"),
        _role_layout(BandRole.CANOPY_BULK_DENSITY, "CBD", "CBD_UNIT", "Canopy bulk density"),
        _role_layout(BandRole.DUFF, "DUFF", "DUFF_UNIT", "Duff"),
        _role_layout(BandRole.COARSE_WOODY_DEBRIS, "CWD", "CWD_OPTION", "Coarse woody debris"),
    )
}

# Top-level scalar fields. The leading bounds copy at 12..44 is written for
# compatibility; readers take the geotransform from the copy at 4172..4204.
SCALAR_FIELDS: Dict[str, ScalarField] = {
    "crown_fuels": ScalarField(0, "<i"),
    "ground_fuels": ScalarField(4, "<i"),
    "latitude": ScalarField(8, "<i"),
    "lead_east": ScalarField(12, "<d"),
    "lead_west": ScalarField(20, "<d"),
    "lead_north": ScalarField(28, "<d"),
    "lead_south": ScalarField(36, "<d"),
    "width": ScalarField(4164, "<i"),
    "height": ScalarField(4168, "<i"),
    "east": ScalarField(4172, "<d"),
    "west": ScalarField(4180, "<d"),
    "north": ScalarField(4188, "<d"),
    "south": ScalarField(4196, "<d"),
    "linear_unit": ScalarField(4204, "<i"),
    "cell_x": ScalarField(4208, "<d"),
    "cell_y": ScalarField(4216, "<d"),
}

BASE_ROLES: Tuple[BandRole, ...] = (
    BandRole.ELEVATION, BandRole.SLOPE, BandRole.ASPECT,
    BandRole.FUEL_MODEL, BandRole.CANOPY_COVER,
)
CROWN_ROLES: Tuple[BandRole, ...] = (
    BandRole.CANOPY_HEIGHT, BandRole.CANOPY_BASE_HEIGHT, BandRole.CANOPY_BULK_DENSITY,
)
GROUND_ROLES: Tuple[BandRole, ...] = (
    BandRole.DUFF, BandRole.COARSE_WOODY_DEBRIS,
)

LINEAR_UNIT_NAMES: Dict[int, str] = {0: "Meters", 1: "Feet", 2: "Kilometers"}


def is_present(flag: int) -> bool:
    """Interpret a crown/ground fuels flag (21 present, 20 absent)."""
    return flag == CROWN_GROUND_PRESENT


def fuels_flag(present: bool) -> int:
    """Encode crown/ground presence as the header flag value."""
    return CROWN_GROUND_PRESENT if present else CROWN_GROUND_ABSENT


def schema_from_band_count(count: int) -> Tuple[bool, bool]:
    """
    Invert ``band_count``.

    Parameters
    ----------
    count : int
        Number of source bands.

    Returns
    -------
    tuple
        ``(has_crown, has_ground)``.

    Raises
    ------
    KeyError
        If ``count`` is not one of 5, 7, 8 or 10.
    """
    return {
        5: (False, False),
        7: (False, True),
        8: (True, False),
        10: (True, True),
    }[count]


def schema_roles(has_crown: bool, has_ground: bool) -> List[BandRole]:
    """Roles of bands 1..N in logical (pixel record) order."""
    roles = list(BASE_ROLES)
    if has_crown:
        roles.extend(CROWN_ROLES)
    if has_ground:
        roles.extend(GROUND_ROLES)
    return roles
