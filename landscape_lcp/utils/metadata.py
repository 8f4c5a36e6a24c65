#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Metadata utilities for LCP files.

This module turns an opened LCP dataset into plain dictionaries and pandas
tables, and saves header metadata as JSON or YAML.
"""
import os
import json
from datetime import datetime
from typing import Any, Dict, Optional

import pandas as pd
import yaml

from landscape_lcp.core.config import EXPORT_CONFIG
from landscape_lcp.core.logging_config import get_module_logger
from landscape_lcp.format.layout import LINEAR_UNIT_NAMES
from landscape_lcp.reader import LcpDataset

# Initialize logger
logger = get_module_logger(__name__)


def band_summary(dataset: LcpDataset) -> pd.DataFrame:
    """
    Tabulate the per-band header fields.

    Parameters
    ----------
    dataset : LcpDataset
        Opened LCP file.

    Returns
    -------
    pd.DataFrame
        One row per band with role, description, unit code and name,
        min, max, number of classes and source file name.
    """
    rows = []
    for descriptor in dataset.bands:
        info = dataset.header.bands[descriptor.role]
        rows.append({
            "band": descriptor.index,
            "role": descriptor.role.name,
            "description": descriptor.description,
            "unit": info.unit,
            "unit_name": next((v for k, v in descriptor.metadata.items()
                               if k.endswith("_UNIT_NAME") or k.endswith("_OPTION_DESC")), None),
            "min": info.minimum,
            "max": info.maximum,
            "num_classes": info.num_classes,
            "file": info.file_name,
        })
    return pd.DataFrame(rows).set_index("band")


def dataset_metadata(dataset: LcpDataset) -> Dict[str, Any]:
    """
    Collect dataset and band metadata in one dictionary.

    Parameters
    ----------
    dataset : LcpDataset
        Opened LCP file.

    Returns
    -------
    dict
        JSON/YAML-serializable description of the file.
    """
    header = dataset.header
    return {
        "timestamp": datetime.now().isoformat(),
        "path": dataset.path,
        "width": header.width,
        "height": header.height,
        "band_count": header.band_count,
        "crown_fuels": header.has_crown_fuels,
        "ground_fuels": header.has_ground_fuels,
        "latitude": header.latitude,
        "linear_unit": LINEAR_UNIT_NAMES.get(header.linear_unit, str(header.linear_unit)),
        "bounds": {
            "east": header.east,
            "west": header.west,
            "north": header.north,
            "south": header.south,
        },
        "cell_size": [header.cell_x, header.cell_y],
        "geotransform": list(dataset.geotransform),
        "crs": dataset.crs.to_wkt() if dataset.crs is not None else None,
        "description": header.description,
        "files": dataset.file_list,
        "bands": [
            {
                "index": descriptor.index,
                "role": descriptor.role.name,
                "description": descriptor.description,
                "metadata": descriptor.metadata,
                "class_values": list(header.bands[descriptor.role].class_values),
            }
            for descriptor in dataset.bands
        ],
    }


def export_header_metadata(dataset: LcpDataset,
                           output_path: str,
                           format: Optional[str] = None) -> str:
    """
    Save dataset metadata to a file.

    Parameters
    ----------
    dataset : LcpDataset
        Opened LCP file.
    output_path : str
        Path to save metadata.
    format : str, optional
        Output format, by default from ``EXPORT_CONFIG``.
        Options: 'json', 'yaml'

    Returns
    -------
    str
        Path of the written file.
    """
    format = (format or EXPORT_CONFIG.get("default_format", "json")).lower()
    metadata = dataset_metadata(dataset)

    output_dir = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(output_dir, exist_ok=True)

    if format == 'json':
        with open(output_path, 'w') as f:
            json.dump(metadata, f, indent=EXPORT_CONFIG.get("indent", 2))
    elif format == 'yaml':
        with open(output_path, 'w') as f:
            yaml.safe_dump(metadata, f, default_flow_style=False, sort_keys=False)
    else:
        raise ValueError(f"Unsupported format: {format}")

    logger.info(f"Saved metadata for {len(metadata['bands'])} bands to {output_path}")
    return output_path


def format_metadata(dataset: LcpDataset, format: str) -> str:
    """Render dataset metadata as a JSON or YAML string."""
    metadata = dataset_metadata(dataset)
    if format == 'json':
        return json.dumps(metadata, indent=EXPORT_CONFIG.get("indent", 2))
    if format == 'yaml':
        return yaml.safe_dump(metadata, default_flow_style=False, sort_keys=False)
    raise ValueError(f"Unsupported format: {format}")
