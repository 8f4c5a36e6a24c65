#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Landscape LCP Package.

Reader and writer for FARSITE v.4 landscape (.lcp) rasters: the fixed
7316-byte header, the interleaved 16-bit band samples, and the write-time
policy that fills units, latitude and statistics into the header.
"""

__version__ = "0.1.0"
__author__ = "Landscape LCP Team"
__email__ = "user@example.com"

from landscape_lcp.reader import open_lcp, LcpDataset
from landscape_lcp.writer import create_copy
from landscape_lcp.driver import LCP_DRIVER, register_driver

__all__ = ["open_lcp", "LcpDataset", "create_copy", "LCP_DRIVER", "register_driver", "__version__"]
