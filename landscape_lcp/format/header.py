#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LCP header codec.

This module decodes the fixed 7316-byte LCP header into an ``LcpHeader``
and encodes an ``LcpHeader`` back into bytes. Every multi-byte field is
read and written little-endian through explicit ``struct``/numpy codecs.

Encoding is split in two steps: ``header_writes`` maps a header to a list
of sparse ``(offset, bytes)`` writes, and ``encode_header`` applies them to
a zero-filled buffer while checking that each region ends where the format
expects it to.
"""
import os
import struct
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Tuple, Union

import numpy as np

from landscape_lcp.core.config import (
    LCP_HEADER_SIZE, LCP_IDENTIFY_BYTES, LCP_MAX_CLASSES, LCP_MAX_PATH,
    LCP_MAX_DESC, LCP_EXTENSION, CROWN_GROUND_ABSENT, CROWN_GROUND_PRESENT,
    STATS_REGION_CHECKPOINTS, FILENAME_REGION_CHECKPOINTS,
)
from landscape_lcp.core.exceptions import LcpFormatError
from landscape_lcp.core.logging_config import get_module_logger
from landscape_lcp.format.layout import (
    BandRole, ROLE_LAYOUTS, SCALAR_FIELDS, DESCRIPTION_OFFSET,
    is_present, schema_roles,
)

# Initialize logger
logger = get_module_logger(__name__)

Buffer = Union[bytes, bytearray, memoryview]

_VALID_FLAGS = (CROWN_GROUND_ABSENT, CROWN_GROUND_PRESENT)


@dataclass(frozen=True)
class BandInfo:
    """Per-role header record."""
    unit: int = 0
    minimum: int = 0
    maximum: int = 0
    num_classes: int = 0
    class_values: Tuple[int, ...] = ()
    file_name: str = ""

    @property
    def has_class_list(self) -> bool:
        return 0 <= self.num_classes < LCP_MAX_CLASSES


@dataclass(frozen=True)
class LcpHeader:
    """Decoded LCP header."""
    crown_fuels: int
    ground_fuels: int
    latitude: int
    east: float
    west: float
    north: float
    south: float
    width: int
    height: int
    linear_unit: int
    cell_x: float
    cell_y: float
    bands: Dict[BandRole, BandInfo] = field(default_factory=dict)
    unit_codes: Dict[BandRole, int] = field(default_factory=dict)
    description: str = ""
    has_statistics: bool = True

    @property
    def has_crown_fuels(self) -> bool:
        return is_present(self.crown_fuels)

    @property
    def has_ground_fuels(self) -> bool:
        return is_present(self.ground_fuels)

    @property
    def roles(self) -> List[BandRole]:
        return schema_roles(self.has_crown_fuels, self.has_ground_fuels)

    @property
    def band_count(self) -> int:
        return len(self.roles)

    @property
    def geotransform(self) -> Tuple[float, float, float, float, float, float]:
        """GDAL-style geotransform: north-up, origin at the west/north corner."""
        return (self.west, self.cell_x, 0.0, self.north, 0.0, -1 * self.cell_y)

    def unit_code(self, role: BandRole) -> int:
        """Unit code stored for ``role``, whether or not the role is present."""
        if role in self.bands:
            return self.bands[role].unit
        return self.unit_codes.get(role, 0)


class HeaderWrite(NamedTuple):
    """One sparse write into the header buffer."""
    region: str
    offset: int
    data: bytes


def _read_scalar(buffer: Buffer, name: str):
    scalar = SCALAR_FIELDS[name]
    return struct.unpack_from(scalar.fmt, buffer, scalar.offset)[0]


def _read_int32(buffer: Buffer, offset: int) -> int:
    return struct.unpack_from("<i", buffer, offset)[0]


def _read_string(buffer: Buffer, offset: int, size: int) -> str:
    raw = bytes(buffer[offset:offset + size - 1])
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _fixed_string(text: str, size: int) -> bytes:
    """Null-padded ``size``-byte field holding at most ``size - 1`` bytes of text."""
    raw = (text or "").encode("utf-8")[:size - 1]
    return raw.ljust(size, b"\0")


def identify(buffer: Buffer, path: Optional[str] = None) -> bool:
    """
    Check whether the leading bytes look like an LCP file.

    Parameters
    ----------
    buffer : bytes
        At least the first 50 bytes of the candidate file.
    path : str, optional
        File name; when given its extension must be ``.lcp``
        (case-insensitive).

    Returns
    -------
    bool
        True if the buffer (and path) pass identification.
    """
    if len(buffer) < LCP_IDENTIFY_BYTES:
        return False

    crown, ground, latitude = struct.unpack_from("<iii", buffer, 0)
    if crown not in _VALID_FLAGS or ground not in _VALID_FLAGS:
        return False
    if latitude < -90 or latitude > 90:
        return False

    if path is not None:
        extension = os.path.splitext(str(path))[1].lstrip(".")
        if extension.lower() != LCP_EXTENSION:
            return False

    return True


def decode_header(buffer: Buffer) -> LcpHeader:
    """
    Decode the fixed LCP header.

    Parameters
    ----------
    buffer : bytes
        The first 7316 (or more) bytes of an LCP file.

    Returns
    -------
    LcpHeader
        Decoded header with one ``BandInfo`` per role in the schema.

    Raises
    ------
    LcpFormatError
        If the buffer is too short, the fuel flags are not 20/21 or the
        latitude lies outside [-90, 90].
    """
    if len(buffer) < LCP_HEADER_SIZE:
        raise LcpFormatError(
            f"LCP header needs {LCP_HEADER_SIZE} bytes, got {len(buffer)}"
        )

    crown = _read_scalar(buffer, "crown_fuels")
    ground = _read_scalar(buffer, "ground_fuels")
    if crown not in _VALID_FLAGS or ground not in _VALID_FLAGS:
        raise LcpFormatError(f"Invalid crown/ground fuel flags: {crown}, {ground}")

    latitude = _read_scalar(buffer, "latitude")
    if latitude < -90 or latitude > 90:
        raise LcpFormatError(f"Invalid latitude in header: {latitude}")

    unit_codes = {
        role: struct.unpack_from("<H", buffer, layout.unit_offset)[0]
        for role, layout in ROLE_LAYOUTS.items()
    }

    bands: Dict[BandRole, BandInfo] = {}
    for role in schema_roles(is_present(crown), is_present(ground)):
        layout = ROLE_LAYOUTS[role]
        num_classes = _read_int32(buffer, layout.num_classes_offset)
        class_values: Tuple[int, ...] = ()
        if 0 <= num_classes < LCP_MAX_CLASSES:
            values = np.frombuffer(
                bytes(buffer[layout.classes_offset:layout.classes_offset + 4 * (num_classes + 1)]),
                dtype="<i4",
            )
            class_values = tuple(int(v) for v in values)
        bands[role] = BandInfo(
            unit=unit_codes[role],
            minimum=_read_int32(buffer, layout.min_offset),
            maximum=_read_int32(buffer, layout.max_offset),
            num_classes=num_classes,
            class_values=class_values,
            file_name=_read_string(buffer, layout.file_name_offset, LCP_MAX_PATH),
        )

    header = LcpHeader(
        crown_fuels=crown,
        ground_fuels=ground,
        latitude=latitude,
        east=_read_scalar(buffer, "east"),
        west=_read_scalar(buffer, "west"),
        north=_read_scalar(buffer, "north"),
        south=_read_scalar(buffer, "south"),
        width=_read_scalar(buffer, "width"),
        height=_read_scalar(buffer, "height"),
        linear_unit=_read_scalar(buffer, "linear_unit"),
        cell_x=_read_scalar(buffer, "cell_x"),
        cell_y=_read_scalar(buffer, "cell_y"),
        bands=bands,
        unit_codes=unit_codes,
        description=_read_string(buffer, DESCRIPTION_OFFSET, LCP_MAX_DESC),
    )
    logger.debug(f"Decoded LCP header: {header.band_count} bands, "
                 f"{header.width}x{header.height}")
    return header


def _pack_scalar(name: str, value) -> HeaderWrite:
    scalar = SCALAR_FIELDS[name]
    return HeaderWrite("scalars", scalar.offset, struct.pack(scalar.fmt, value))


def _class_block(info: BandInfo) -> bytes:
    block = np.zeros(LCP_MAX_CLASSES, dtype="<i4")
    if info.has_class_list:
        values = list(info.class_values)[:info.num_classes + 1]
        block[:len(values)] = values
    return block.tobytes()


def header_writes(header: LcpHeader) -> List[HeaderWrite]:
    """
    Map a header to the sparse writes that encode it.

    The result depends only on the header: absent roles produce no writes,
    so their slots stay zero-filled. Writes are ordered by region (leading
    scalars, statistics, trailing scalars, unit codes, file names,
    description) and by offset within a region.

    Parameters
    ----------
    header : LcpHeader
        Header to encode.

    Returns
    -------
    list of HeaderWrite
        ``(region, offset, data)`` tuples.
    """
    writes: List[HeaderWrite] = [
        HeaderWrite("lead", 0, struct.pack("<iii", header.crown_fuels,
                                           header.ground_fuels, header.latitude)),
        HeaderWrite("lead", SCALAR_FIELDS["lead_east"].offset,
                    struct.pack("<dddd", header.east, header.west,
                                header.north, header.south)),
    ]

    roles = header.roles
    if header.has_statistics:
        for role in roles:
            layout = ROLE_LAYOUTS[role]
            info = header.bands.get(role, BandInfo())
            slot = struct.pack("<iii", info.minimum, info.maximum, info.num_classes)
            writes.append(HeaderWrite("stats", layout.min_offset, slot + _class_block(info)))

    for name in ("width", "height", "east", "west", "north", "south",
                 "linear_unit", "cell_x", "cell_y"):
        writes.append(_pack_scalar(name, getattr(header, name)))

    units = np.array([header.unit_code(role) for role in BandRole], dtype="<u2")
    writes.append(HeaderWrite("units", ROLE_LAYOUTS[BandRole.ELEVATION].unit_offset,
                              units.tobytes()))

    if any(header.bands.get(role, BandInfo()).file_name for role in roles):
        for role in roles:
            layout = ROLE_LAYOUTS[role]
            writes.append(HeaderWrite(
                "file_names", layout.file_name_offset,
                _fixed_string(header.bands.get(role, BandInfo()).file_name, LCP_MAX_PATH),
            ))

    writes.append(HeaderWrite("description", DESCRIPTION_OFFSET,
                              _fixed_string(header.description, LCP_MAX_DESC)))
    return writes


class _HeaderBuffer:
    """Zero-filled fixed-size buffer with a write cursor."""

    def __init__(self, size: int):
        self._data = bytearray(size)
        self._pos = 0

    def seek(self, offset: int) -> None:
        if offset < 0 or offset > len(self._data):
            raise AssertionError(f"Header seek out of range: {offset}")
        self._pos = offset

    def write(self, data: bytes) -> None:
        end = self._pos + len(data)
        if end > len(self._data):
            raise AssertionError(f"Header write past end: {self._pos}+{len(data)}")
        self._data[self._pos:end] = data
        self._pos = end

    def tell(self) -> int:
        return self._pos

    def getvalue(self) -> bytes:
        return bytes(self._data)


# Region -> (allowed cursor positions at its end, position used when empty)
_REGION_CHECKS = {
    "stats": (STATS_REGION_CHECKPOINTS, SCALAR_FIELDS["width"].offset),
    "file_names": (FILENAME_REGION_CHECKPOINTS, DESCRIPTION_OFFSET),
}


def _close_region(buf: _HeaderBuffer, region: str, wrote_any: bool) -> None:
    checkpoints, empty_end = _REGION_CHECKS[region]
    if not wrote_any:
        buf.seek(empty_end)
    if buf.tell() not in checkpoints:
        raise AssertionError(
            f"Header cursor at {buf.tell()} after {region} region, "
            f"expected one of {checkpoints}"
        )


def encode_header(header: LcpHeader) -> bytes:
    """
    Encode a header into its 7316-byte representation.

    Parameters
    ----------
    header : LcpHeader
        Header to encode.

    Returns
    -------
    bytes
        Exactly ``LCP_HEADER_SIZE`` bytes.

    Raises
    ------
    AssertionError
        If a region ends at a position the format does not allow, which
        means the layout tables and the schema disagree.
    """
    buf = _HeaderBuffer(LCP_HEADER_SIZE)
    writes = header_writes(header)
    seen = {region: False for region in _REGION_CHECKS}

    order = ["lead", "stats", "scalars", "units", "file_names", "description"]
    for region in order:
        for write in writes:
            if write.region != region:
                continue
            buf.seek(write.offset)
            buf.write(write.data)
            if region in seen:
                seen[region] = True
        if region in _REGION_CHECKS:
            _close_region(buf, region, seen[region])

    return buf.getvalue()
