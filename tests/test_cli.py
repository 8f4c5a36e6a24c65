#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for the command line interface, driver descriptor and
configuration helpers.
"""

import io
import os
import json
import tempfile
import unittest
from contextlib import redirect_stdout

import yaml

from landscape_lcp.cli import main
from landscape_lcp.core.config import (
    load_creation_options, parse_bool, parse_option_list,
)
from landscape_lcp.driver import LCP_DRIVER, driver_info, register_driver
from landscape_lcp.reader import open_lcp
from tests.synthetic import create_synthetic_landscape, write_geotiff


class TestConfigHelpers(unittest.TestCase):
    """Test option parsing helpers."""

    def test_parse_bool(self):
        for value in ("YES", "on", "True", "1", True, 1):
            self.assertTrue(parse_bool(value, False))
        for value in ("NO", "off", "false", "0", False, 0):
            self.assertFalse(parse_bool(value, True))
        self.assertTrue(parse_bool(None, True))

    def test_parse_option_list(self):
        options = parse_option_list(["elevation_unit=FEET", "DESCRIPTION=a=b"])
        self.assertEqual(options, {"ELEVATION_UNIT": "FEET", "DESCRIPTION": "a=b"})
        with self.assertRaises(ValueError):
            parse_option_list(["LATITUDE"])

    def test_load_creation_options(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "options.yaml")
            with open(path, "w") as f:
                yaml.safe_dump({"latitude": 40, "classify_data": False}, f)
            self.assertEqual(load_creation_options(path),
                             {"LATITUDE": 40, "CLASSIFY_DATA": False})


class TestDriver(unittest.TestCase):
    """Test registration into a host registry."""

    def test_register(self):
        registry = {}
        self.assertIs(register_driver(registry), LCP_DRIVER)
        self.assertIs(registry["LCP"], LCP_DRIVER)

    def test_register_keeps_existing(self):
        registry = {"LCP": "existing"}
        self.assertEqual(register_driver(registry), "existing")

    def test_driver_info(self):
        info = driver_info()
        self.assertEqual(info["extension"], "lcp")
        self.assertEqual(info["creation_data_types"], ["Int16"])
        names = [option["name"] for option in info["creation_options"]]
        self.assertIn("ELEVATION_UNIT", names)
        self.assertIn("LATITUDE", names)
        self.assertNotIn("CWD_OPTION", names)
        aspect = next(o for o in info["creation_options"] if o["name"] == "ASPECT_UNIT")
        self.assertEqual(aspect["values"], ["GRASS_CATEGORIES", "GRASS_DEGREES", "AZIMUTH_DEGREES"])

    def test_package_exports_driver(self):
        import landscape_lcp
        self.assertIs(landscape_lcp.LCP_DRIVER, LCP_DRIVER)
        registry = {}
        self.assertIs(landscape_lcp.register_driver(registry), LCP_DRIVER)
        self.assertIs(LCP_DRIVER.create_copy, landscape_lcp.create_copy)
        self.assertIs(LCP_DRIVER.open, landscape_lcp.open_lcp)


class TestCli(unittest.TestCase):
    """Test the lcp command."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = self._tmp.name
        data = create_synthetic_landscape(7, shape=(8, 12), seed=2)
        self.tif = write_geotiff(os.path.join(self.tmpdir, "stack.tif"), data)
        self.lcp = os.path.join(self.tmpdir, "stack.lcp")

    def tearDown(self):
        self._tmp.cleanup()

    def run_cli(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def test_create_and_info(self):
        code, out = self.run_cli("create", self.tif, self.lcp, "--quiet",
                                 "--co", "ELEVATION_UNIT=FEET", "--co", "DESCRIPTION=cli test")
        self.assertEqual(code, 0)
        self.assertIn("7 bands", out)

        dataset = open_lcp(self.lcp)
        self.assertEqual(dataset.header.description, "cli test")
        self.assertEqual(dataset.band(1).metadata["ELEVATION_UNIT"], 1)

        code, out = self.run_cli("info", self.lcp)
        self.assertEqual(code, 0)
        self.assertIn("DUFF", out)
        self.assertIn("LATITUDE: 36", out)

    def test_info_json(self):
        self.run_cli("create", self.tif, self.lcp, "-q")
        code, out = self.run_cli("info", self.lcp, "--format", "json")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["band_count"], 7)

    def test_info_yaml_to_file(self):
        self.run_cli("create", self.tif, self.lcp, "-q")
        target = os.path.join(self.tmpdir, "meta.yaml")
        code, _ = self.run_cli("info", self.lcp, "--format", "yaml", "--output", target)
        self.assertEqual(code, 0)
        with open(target) as f:
            self.assertTrue(yaml.safe_load(f)["ground_fuels"])

    def test_options_file(self):
        options = os.path.join(self.tmpdir, "options.yaml")
        with open(options, "w") as f:
            yaml.safe_dump({"LATITUDE": 44, "DUFF_UNIT": "TONS_PER_ACRE_X_10"}, f)
        code, _ = self.run_cli("create", self.tif, self.lcp, "-q",
                               "--options-file", options, "--co", "LATITUDE=45")
        self.assertEqual(code, 0)
        dataset = open_lcp(self.lcp)
        self.assertEqual(dataset.header.latitude, 45)
        self.assertEqual(dataset.band(6).metadata["DUFF_UNIT"], 2)

    def test_invalid_option_exit_code(self):
        code, _ = self.run_cli("create", self.tif, self.lcp, "-q", "--co", "LATITUDE=200")
        self.assertEqual(code, 1)
        self.assertFalse(os.path.exists(self.lcp))

    def test_malformed_option_exit_code(self):
        code, _ = self.run_cli("create", self.tif, self.lcp, "-q", "--co", "LATITUDE")
        self.assertEqual(code, 1)

    def test_info_not_an_lcp(self):
        code, _ = self.run_cli("info", self.tif)
        self.assertEqual(code, 1)

    def test_version_names_driver(self):
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit) as cm:
            main(["--version"])
        self.assertEqual(cm.exception.code, 0)
        self.assertIn(LCP_DRIVER.long_name, out.getvalue())


if __name__ == '__main__':
    unittest.main()
