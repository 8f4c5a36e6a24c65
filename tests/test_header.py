#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for the LCP header codec.
"""

import struct
import unittest
from dataclasses import replace

from landscape_lcp.core.config import (
    LCP_HEADER_SIZE, STATS_REGION_CHECKPOINTS, FILENAME_REGION_CHECKPOINTS,
)
from landscape_lcp.core.exceptions import LcpFormatError
from landscape_lcp.format.header import (
    BandInfo, LcpHeader, _HeaderBuffer, _close_region,
    decode_header, encode_header, header_writes, identify,
)
from landscape_lcp.format.layout import (
    BandRole, ROLE_LAYOUTS, fuels_flag, schema_from_band_count, schema_roles,
)
from landscape_lcp.format.units import ABSENT_ROLE_CODES


def build_test_header(band_count, description="Test landscape", file_name="dem.tif"):
    """Header with distinct values in every populated field."""
    has_crown, has_ground = schema_from_band_count(band_count)
    bands = {}
    unit_codes = dict(ABSENT_ROLE_CODES)
    for role in schema_roles(has_crown, has_ground):
        i = int(role)
        if role == BandRole.ELEVATION:
            num_classes, classes = -1, ()
        else:
            classes = (0,) + tuple(range(i, i + 3))
            num_classes = 3
        bands[role] = BandInfo(unit=1, minimum=-i, maximum=100 + i,
                               num_classes=num_classes, class_values=classes,
                               file_name=file_name)
        unit_codes[role] = 1
    for role in BandRole:
        unit_codes.setdefault(role, 0)
    return LcpHeader(
        crown_fuels=fuels_flag(has_crown),
        ground_fuels=fuels_flag(has_ground),
        latitude=36,
        east=500900.0,
        west=500000.0,
        north=4000000.0,
        south=3999400.0,
        width=30,
        height=20,
        linear_unit=0,
        cell_x=30.0,
        cell_y=30.0,
        bands=bands,
        unit_codes=unit_codes,
        description=description,
    )


class TestHeaderRoundTrip(unittest.TestCase):
    """Encode then decode headers of every schema."""

    def test_round_trip_all_schemas(self):
        """Decoding an encoded header gives the same header back."""
        for count in (5, 7, 8, 10):
            with self.subTest(bands=count):
                header = build_test_header(count)
                data = encode_header(header)
                self.assertEqual(len(data), LCP_HEADER_SIZE)
                decoded = decode_header(data)
                self.assertEqual(decoded, header)
                self.assertEqual(decoded.band_count, count)

    def test_band_order(self):
        """Crown roles come before ground roles."""
        header = build_test_header(10)
        self.assertEqual(header.roles[5:], [
            BandRole.CANOPY_HEIGHT, BandRole.CANOPY_BASE_HEIGHT,
            BandRole.CANOPY_BULK_DENSITY, BandRole.DUFF, BandRole.COARSE_WOODY_DEBRIS,
        ])
        ground_only = build_test_header(7)
        self.assertEqual(ground_only.roles[5:], [BandRole.DUFF, BandRole.COARSE_WOODY_DEBRIS])

    def test_little_endian_scalars(self):
        """Scalar fields sit at fixed offsets in little-endian order."""
        data = encode_header(build_test_header(8))
        self.assertEqual(struct.unpack_from("<iii", data, 0), (21, 20, 36))
        self.assertEqual(struct.unpack_from("<dddd", data, 12),
                         (500900.0, 500000.0, 4000000.0, 3999400.0))
        self.assertEqual(struct.unpack_from("<ii", data, 4164), (30, 20))
        self.assertEqual(struct.unpack_from("<dddd", data, 4172),
                         (500900.0, 500000.0, 4000000.0, 3999400.0))
        self.assertEqual(struct.unpack_from("<i", data, 4204)[0], 0)
        self.assertEqual(struct.unpack_from("<dd", data, 4208), (30.0, 30.0))

    def test_absent_roles_leave_zero_slots(self):
        """Stats and file name slots of absent roles stay zero-filled."""
        data = encode_header(build_test_header(5))
        for role in (BandRole.CANOPY_HEIGHT, BandRole.DUFF, BandRole.COARSE_WOODY_DEBRIS):
            layout = ROLE_LAYOUTS[role]
            self.assertEqual(data[layout.min_offset:layout.min_offset + 412], bytes(412))
            self.assertEqual(data[layout.file_name_offset:layout.file_name_offset + 256],
                             bytes(256))

    def test_absent_role_unit_codes_written(self):
        """Unit slots of absent roles hold their placeholder codes."""
        data = encode_header(build_test_header(5))
        code = struct.unpack_from("<H", data, ROLE_LAYOUTS[BandRole.CANOPY_BULK_DENSITY].unit_offset)
        self.assertEqual(code[0], 3)
        code = struct.unpack_from("<H", data, ROLE_LAYOUTS[BandRole.DUFF].unit_offset)
        self.assertEqual(code[0], 1)

    def test_class_values_stored_as_values(self):
        """Class values are stored unshifted after the leading 0."""
        header = build_test_header(5)
        data = encode_header(header)
        layout = ROLE_LAYOUTS[BandRole.SLOPE]
        stored = struct.unpack_from("<5i", data, layout.classes_offset)
        self.assertEqual(stored, (0, 1, 2, 3, 0))

    def test_region_checkpoints(self):
        """Statistics and file name regions end at the allowed positions."""
        expected = {5: (2104, 5524), 7: (4164, 6804), 8: (3340, 6292), 10: (4164, 6804)}
        for count, (stats_end, names_end) in expected.items():
            with self.subTest(bands=count):
                writes = header_writes(build_test_header(count))
                stats = [w for w in writes if w.region == "stats"]
                names = [w for w in writes if w.region == "file_names"]
                self.assertEqual(stats[-1].offset + len(stats[-1].data), stats_end)
                self.assertEqual(names[-1].offset + len(names[-1].data), names_end)
                self.assertIn(stats_end, STATS_REGION_CHECKPOINTS)
                self.assertIn(names_end, FILENAME_REGION_CHECKPOINTS)

    def test_no_statistics_writes_no_stats_region(self):
        """Headers without statistics skip the stats region entirely."""
        header = build_test_header(5)
        header = replace(header, has_statistics=False)
        writes = header_writes(header)
        self.assertFalse([w for w in writes if w.region == "stats"])
        data = encode_header(header)
        self.assertEqual(data[44:2104], bytes(2104 - 44))

    def test_no_file_names_writes_no_file_region(self):
        """Empty file names leave the whole file name region zeroed."""
        data = encode_header(build_test_header(10, file_name=""))
        self.assertEqual(data[4244:6804], bytes(6804 - 4244))

    def test_unexpected_region_end_asserts(self):
        """A cursor off the checkpoints is an internal error."""
        buf = _HeaderBuffer(LCP_HEADER_SIZE)
        buf.seek(2000)
        with self.assertRaises(AssertionError):
            _close_region(buf, "stats", True)

    def test_description_truncated(self):
        """Descriptions keep at most 511 bytes."""
        header = build_test_header(5, description="x" * 600)
        decoded = decode_header(encode_header(header))
        self.assertEqual(decoded.description, "x" * 511)

    def test_file_name_truncated(self):
        """File names keep at most 255 bytes."""
        header = build_test_header(5, file_name="f" * 300)
        decoded = decode_header(encode_header(header))
        self.assertEqual(decoded.bands[BandRole.ELEVATION].file_name, "f" * 255)

    def test_geotransform(self):
        """The geotransform is north-up from the west/north corner."""
        header = build_test_header(5)
        self.assertEqual(header.geotransform, (500000.0, 30.0, 0.0, 4000000.0, 0.0, -30.0))


class TestIdentify(unittest.TestCase):
    """Test LCP identification and decode validation."""

    def setUp(self):
        self.data = encode_header(build_test_header(5))

    def test_identify_valid(self):
        self.assertTrue(identify(self.data))
        self.assertTrue(identify(self.data, "landscape.lcp"))
        self.assertTrue(identify(self.data, "LANDSCAPE.LCP"))

    def test_identify_short_buffer(self):
        self.assertFalse(identify(self.data[:49]))

    def test_identify_bad_flags(self):
        data = bytearray(self.data)
        struct.pack_into("<i", data, 0, 19)
        self.assertFalse(identify(data))
        struct.pack_into("<ii", data, 0, 21, 22)
        self.assertFalse(identify(data))

    def test_identify_bad_latitude(self):
        data = bytearray(self.data)
        struct.pack_into("<i", data, 8, 91)
        self.assertFalse(identify(data))
        struct.pack_into("<i", data, 8, -91)
        self.assertFalse(identify(data))

    def test_identify_wrong_extension(self):
        self.assertFalse(identify(self.data, "landscape.tif"))

    def test_decode_short_buffer(self):
        with self.assertRaises(LcpFormatError):
            decode_header(self.data[:7315])

    def test_decode_bad_flags(self):
        data = bytearray(self.data)
        struct.pack_into("<i", data, 4, 0)
        with self.assertRaises(LcpFormatError):
            decode_header(data)

    def test_decode_bad_latitude(self):
        data = bytearray(self.data)
        struct.pack_into("<i", data, 8, 120)
        with self.assertRaises(LcpFormatError):
            decode_header(data)

    def test_decode_too_many_classes(self):
        """A class count of -1 or above 99 carries no class list."""
        data = bytearray(self.data)
        struct.pack_into("<i", data, ROLE_LAYOUTS[BandRole.SLOPE].num_classes_offset, 100)
        header = decode_header(data)
        self.assertEqual(header.bands[BandRole.SLOPE].num_classes, 100)
        self.assertEqual(header.bands[BandRole.SLOPE].class_values, ())


if __name__ == '__main__':
    unittest.main()
