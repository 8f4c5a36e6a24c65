#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LCP file reader.

This module opens an LCP file, decodes its header, derives the band schema
and exposes per-band descriptors, dataset metadata, the geotransform and
row/band pixel access. An ``LcpDataset`` is itself a ``RasterSource`` so it
can be copied into a new LCP.
"""
import os
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Union

import numpy as np

from landscape_lcp.core.config import (
    LCP_HEADER_SIZE, LCP_MAX_CLASSES, DEFAULT_NODATA_VALUE,
)
from landscape_lcp.core.exceptions import LcpFormatError, handle_io_error
from landscape_lcp.core.io import RasterSource, read_prj
from landscape_lcp.core.logging_config import get_module_logger
from landscape_lcp.format.header import LcpHeader, decode_header, identify
from landscape_lcp.format.layout import (
    BandRole, ROLE_LAYOUTS, LINEAR_UNIT_NAMES,
)
from landscape_lcp.format.units import unit_display_name

# Initialize logger
logger = get_module_logger(__name__)

SAMPLE_DTYPE = np.dtype("<i2")


class BandDescriptor(NamedTuple):
    """Description of one band as stored in the pixel records."""
    index: int             # 1-based
    role: BandRole
    description: str
    metadata: Dict[str, Any]
    offset: int            # byte offset of the band's first sample
    pixel_stride: int      # bytes between samples of one band
    line_stride: int       # bytes between rows


def _unit_metadata_keys(role: BandRole):
    """(code key, name key) for a role's unit metadata."""
    layout = ROLE_LAYOUTS[role]
    if role == BandRole.FUEL_MODEL:
        return "FUEL_MODEL_OPTION", "FUEL_MODEL_OPTION_DESC"
    if role == BandRole.COARSE_WOODY_DEBRIS:
        return "CWD_OPTION", None
    return layout.unit_key, f"{layout.unit_key}_NAME"


def band_metadata(header: LcpHeader, role: BandRole) -> Dict[str, Any]:
    """
    Build the metadata dictionary of one band.

    Parameters
    ----------
    header : LcpHeader
        Decoded header.
    role : BandRole
        Role of the band; must be present in the header's schema.

    Returns
    -------
    dict
        Unit code and name, min, max, number of classes and source file
        name, keyed like ``ELEVATION_MIN``. Fuel model bands also carry
        ``FUEL_MODEL_VALUES``.
    """
    info = header.bands[role]
    key = ROLE_LAYOUTS[role].key
    code_key, name_key = _unit_metadata_keys(role)

    metadata: Dict[str, Any] = {code_key: info.unit}
    display = unit_display_name(role, info.unit)
    if name_key and display is not None:
        metadata[name_key] = display

    metadata[f"{key}_MIN"] = info.minimum
    metadata[f"{key}_MAX"] = info.maximum
    metadata[f"{key}_NUM_CLASSES"] = info.num_classes

    if role == BandRole.FUEL_MODEL:
        values: List[int] = []
        if 0 < info.num_classes < LCP_MAX_CLASSES:
            values = [v for v in info.class_values
                      if info.minimum <= v <= info.maximum]
        metadata["FUEL_MODEL_VALUES"] = ",".join(str(v) for v in values)

    metadata[f"{key}_FILE"] = info.file_name
    return metadata


class LcpDataset(RasterSource):
    """
    An opened LCP file.

    Parameters
    ----------
    path : str
        Path of the ``.lcp`` file.
    header : LcpHeader
        Decoded header.
    """

    def __init__(self, path: str, header: LcpHeader):
        self.path = path
        self.header = header
        self.width = header.width
        self.height = header.height
        self.count = header.band_count
        self.dtype = SAMPLE_DTYPE
        self.nodata = DEFAULT_NODATA_VALUE
        self.geotransform = header.geotransform
        self.crs, self.prj_path = read_prj(path)

        self.pixel_stride = 2 * self.count
        self.line_stride = self.pixel_stride * self.width
        self.bands: List[BandDescriptor] = [
            BandDescriptor(
                index=i,
                role=role,
                description=ROLE_LAYOUTS[role].description,
                metadata=band_metadata(header, role),
                offset=LCP_HEADER_SIZE + 2 * (i - 1),
                pixel_stride=self.pixel_stride,
                line_stride=self.line_stride,
            )
            for i, role in enumerate(header.roles, start=1)
        ]

    @property
    def metadata(self) -> Dict[str, Any]:
        """Dataset-level metadata: latitude, linear unit and description."""
        metadata: Dict[str, Any] = {"LATITUDE": self.header.latitude}
        unit_name = LINEAR_UNIT_NAMES.get(self.header.linear_unit)
        if unit_name is not None:
            metadata["LINEAR_UNIT"] = unit_name
        metadata["DESCRIPTION"] = self.header.description
        return metadata

    @property
    def file_list(self) -> List[str]:
        files = [self.path]
        if self.crs is not None and self.prj_path:
            files.append(self.prj_path)
        return files

    def band(self, index: int) -> BandDescriptor:
        if index < 1 or index > self.count:
            raise IndexError(f"Band {index} out of range 1..{self.count}")
        return self.bands[index - 1]

    @handle_io_error("Reading LCP row")
    def read_row(self, band: int, y: int) -> np.ndarray:
        descriptor = self.band(band)
        if y < 0 or y >= self.height:
            raise IndexError(f"Row {y} out of range 0..{self.height - 1}")
        with open(self.path, "rb") as f:
            f.seek(LCP_HEADER_SIZE + y * self.line_stride)
            record = f.read(self.line_stride)
        if len(record) != self.line_stride:
            raise LcpFormatError(f"Short read at row {y} of {self.path}")
        samples = np.frombuffer(record, dtype=SAMPLE_DTYPE)
        return samples[descriptor.index - 1::self.count].copy()

    @handle_io_error("Reading LCP band")
    def read(self, band: Optional[int] = None) -> np.ndarray:
        """
        Read one band as ``(rows, cols)`` or all bands as ``(bands, rows, cols)``.
        """
        samples = np.fromfile(self.path, dtype=SAMPLE_DTYPE,
                              count=self.height * self.width * self.count,
                              offset=LCP_HEADER_SIZE)
        records = samples.reshape(self.height, self.width, self.count)
        if band is None:
            return np.ascontiguousarray(records.transpose(2, 0, 1))
        descriptor = self.band(band)
        return np.ascontiguousarray(records[:, :, descriptor.index - 1])

    def __repr__(self) -> str:
        return (f"LcpDataset({self.path!r}, {self.count} bands, "
                f"{self.width}x{self.height})")


@handle_io_error("Opening LCP file")
def open_lcp(path: Union[str, Path], check_extension: bool = True) -> LcpDataset:
    """
    Open an LCP file read-only.

    Parameters
    ----------
    path : str or Path
        Path to the ``.lcp`` file.
    check_extension : bool, optional
        Require the ``.lcp`` extension, by default True.

    Returns
    -------
    LcpDataset
        The opened dataset.

    Raises
    ------
    LcpFormatError
        If the file is not an LCP file, its header is invalid or the file
        is shorter than its header says.
    LcpIOError
        If the file cannot be read.
    """
    path = str(path)
    with open(path, "rb") as f:
        buffer = f.read(LCP_HEADER_SIZE)
        f.seek(0, os.SEEK_END)
        file_size = f.tell()

    if not identify(buffer, path if check_extension else None):
        raise LcpFormatError(f"{path} is not a FARSITE v.4 LCP file")
    if len(buffer) < LCP_HEADER_SIZE:
        raise LcpFormatError(f"File too short: {path}")

    header = decode_header(buffer)
    if header.width <= 0 or header.height <= 0:
        raise LcpFormatError(
            f"Invalid dataset dimensions: {header.width} x {header.height}"
        )

    expected = LCP_HEADER_SIZE + header.width * header.height * header.band_count * 2
    if file_size < expected:
        raise LcpFormatError(
            f"File too short: {path} has {file_size} bytes, expected {expected}"
        )

    dataset = LcpDataset(path, header)
    logger.info(f"Opened {dataset!r}")
    return dataset
