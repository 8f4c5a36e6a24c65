#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line entry point for landscape-lcp.

Two subcommands are provided: ``info`` prints the header of an LCP file and
``create`` converts any rasterio-readable raster into an LCP file.
"""
import sys
import argparse
from typing import List, Optional

import pandas as pd

from landscape_lcp import __version__
from landscape_lcp.core.config import load_creation_options, parse_option_list
from landscape_lcp.core.exceptions import LcpError
from landscape_lcp.core.io import open_source
from landscape_lcp.core.logging_config import setup_logging, get_module_logger
from landscape_lcp.driver import LCP_DRIVER
from landscape_lcp.utils.metadata import (
    band_summary, export_header_metadata, format_metadata,
)
from landscape_lcp.utils.utils import TqdmProgress

# Initialize logger
logger = get_module_logger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns
    -------
    argparse.Namespace
        Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        prog="lcp",
        description="Read and write FARSITE v.4 landscape (.lcp) files."
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"landscape-lcp v{__version__} ({LCP_DRIVER.long_name})"
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')
    subparsers.required = True

    # Info command
    info_parser = subparsers.add_parser('info', help='Describe an LCP file')
    info_parser.add_argument("path", help="Path to the .lcp file")
    info_parser.add_argument(
        "--format", "-f",
        choices=["text", "json", "yaml"],
        default="text",
        help="Output format (default: text)"
    )
    info_parser.add_argument(
        "--output", "-o",
        help="Write json/yaml metadata to this file instead of stdout"
    )

    # Create command
    create_parser = subparsers.add_parser('create', help='Create an LCP file from a raster')
    create_parser.add_argument("source", help="Path to a 5, 7, 8 or 10 band raster")
    create_parser.add_argument("destination", help="Path of the .lcp file to write")
    create_parser.add_argument(
        "--co",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Creation option, may be repeated (e.g. --co ELEVATION_UNIT=FEET)"
    )
    create_parser.add_argument(
        "--options-file",
        help="YAML file with creation options; --co values take precedence"
    )
    create_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of converting data types or defaulting units"
    )
    create_parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Hide the progress bar"
    )

    return parser.parse_args(argv)


def show_info(args: argparse.Namespace) -> int:
    """
    Print or export the header of an LCP file.

    Returns
    -------
    int
        Exit code.
    """
    dataset = LCP_DRIVER.open(args.path)

    if args.format == "text":
        header = dataset.header
        print(f"File: {dataset.path}")
        print(f"Size: {header.width} x {header.height}, {header.band_count} bands")
        print(f"Crown fuels: {'yes' if header.has_crown_fuels else 'no'}, "
              f"ground fuels: {'yes' if header.has_ground_fuels else 'no'}")
        for key, value in dataset.metadata.items():
            print(f"{key}: {value}")
        print(f"Bounds (W, S, E, N): {header.west}, {header.south}, {header.east}, {header.north}")
        print(f"Cell size: {header.cell_x} x {header.cell_y}")
        print(f"CRS: {dataset.crs.to_string() if dataset.crs is not None else 'none'}")
        with pd.option_context("display.max_columns", None, "display.width", 200):
            print(band_summary(dataset).to_string())
        return 0

    if args.output:
        export_header_metadata(dataset, args.output, args.format)
    else:
        print(format_metadata(dataset, args.format))
    return 0


def create_lcp(args: argparse.Namespace) -> int:
    """
    Create an LCP file from a raster.

    Returns
    -------
    int
        Exit code.
    """
    options = {}
    try:
        if args.options_file:
            options.update(load_creation_options(args.options_file))
        options.update(parse_option_list(args.co))
    except (OSError, ValueError) as e:
        logger.error(str(e))
        return 1

    with open_source(args.source) as source:
        with TqdmProgress(desc="Writing LCP", disable=args.quiet) as progress:
            dataset = LCP_DRIVER.create_copy(args.destination, source, options,
                                             strict=args.strict, progress=progress)

    print(f"Created {dataset.path} ({dataset.count} bands, "
          f"{dataset.width} x {dataset.height})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line interface.

    Returns
    -------
    int
        0 on success, 1 on an LCP error.
    """
    args = parse_arguments(argv)
    setup_logging(log_level=args.log_level)

    try:
        if args.command == 'info':
            return show_info(args)
        elif args.command == 'create':
            return create_lcp(args)
        else:
            logger.error(f"Unknown command: {args.command}")
            return 1
    except LcpError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
