#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for latitude and linear unit resolution.
"""

import unittest

from rasterio.crs import CRS

from landscape_lcp.core.exceptions import GeoReferenceError, InvalidOptionError
from landscape_lcp.format.georef import (
    LINEAR_UNIT_FEET, LINEAR_UNIT_KILOMETERS, LINEAR_UNIT_METERS,
    header_latitude, parse_latitude, raster_center, resolve_latitude,
    resolve_linear_unit,
)
from tests.synthetic import UTM_CRS, utm_geotransform


class TestLatitude(unittest.TestCase):
    """Test the header reference latitude."""

    def setUp(self):
        self.gt = utm_geotransform()
        self.crs = CRS.from_user_input(UTM_CRS)

    def test_explicit_latitude(self):
        self.assertEqual(resolve_latitude("45", None, self.gt, 20, 30), 45.0)
        self.assertEqual(resolve_latitude(-12, None, self.gt, 20, 30), -12.0)

    def test_explicit_latitude_out_of_range(self):
        with self.assertRaises(InvalidOptionError):
            resolve_latitude("200", self.crs, self.gt, 20, 30)
        with self.assertRaises(InvalidOptionError):
            parse_latitude("-91")

    def test_explicit_latitude_not_a_number(self):
        with self.assertRaises(InvalidOptionError):
            parse_latitude("north")

    def test_latitude_from_utm(self):
        """The raster center of a UTM 11N grid near 4000 km north is about 36 degrees."""
        latitude = resolve_latitude(None, self.crs, self.gt, 20, 30)
        self.assertAlmostEqual(latitude, 36.1, delta=0.2)
        self.assertEqual(header_latitude(latitude), 36)

    def test_latitude_from_geographic(self):
        gt = (-120.0, 0.01, 0.0, 40.0, 0.0, -0.01)
        latitude = resolve_latitude(None, CRS.from_epsg(4326), gt, 100, 100)
        self.assertAlmostEqual(latitude, 39.5, delta=0.01)

    def test_latitude_without_crs(self):
        with self.assertRaises(GeoReferenceError):
            resolve_latitude(None, None, self.gt, 20, 30)

    def test_raster_center(self):
        self.assertEqual(raster_center(self.gt, 30, 20), (500450.0, 3999700.0))

    def test_header_latitude_rounding(self):
        self.assertEqual(header_latitude(36.4), 36)
        self.assertEqual(header_latitude(36.5), 37)
        self.assertEqual(header_latitude(-0.2), 0)


class TestLinearUnit(unittest.TestCase):
    """Test the header linear unit code."""

    def test_explicit_options(self):
        self.assertEqual(resolve_linear_unit("METER", None, True), LINEAR_UNIT_METERS)
        self.assertEqual(resolve_linear_unit("metres", None, True), LINEAR_UNIT_METERS)
        self.assertEqual(resolve_linear_unit("FOOT", None, True), LINEAR_UNIT_FEET)
        self.assertEqual(resolve_linear_unit("feet", None, True), LINEAR_UNIT_FEET)
        self.assertEqual(resolve_linear_unit("KILOMETER", None, True), LINEAR_UNIT_KILOMETERS)

    def test_unknown_option(self):
        with self.assertRaises(InvalidOptionError):
            resolve_linear_unit("FURLONG", None, False)

    def test_from_projected_crs(self):
        crs = CRS.from_epsg(26911)
        self.assertEqual(resolve_linear_unit(None, crs, True), LINEAR_UNIT_METERS)
        self.assertEqual(resolve_linear_unit("SET_FROM_SRS", crs, True), LINEAR_UNIT_METERS)

    def test_without_crs(self):
        with self.assertLogs("landscape_lcp", level="WARNING"):
            self.assertEqual(resolve_linear_unit(None, None, False), LINEAR_UNIT_METERS)
        with self.assertRaises(GeoReferenceError):
            resolve_linear_unit(None, None, True)

    def test_geographic_crs(self):
        """Geographic systems have no linear unit."""
        crs = CRS.from_epsg(4326)
        with self.assertLogs("landscape_lcp", level="WARNING"):
            self.assertEqual(resolve_linear_unit(None, crs, False), LINEAR_UNIT_METERS)
        with self.assertRaises(GeoReferenceError):
            resolve_linear_unit(None, crs, True)

    def test_scaled_unit(self):
        """A US survey foot system has a scale other than 1."""
        crs = CRS.from_epsg(2227)
        with self.assertLogs("landscape_lcp", level="WARNING"):
            resolve_linear_unit(None, crs, False)
        with self.assertRaises(GeoReferenceError):
            resolve_linear_unit(None, crs, True)


if __name__ == '__main__':
    unittest.main()
