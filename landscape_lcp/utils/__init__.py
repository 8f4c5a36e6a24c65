#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility modules for LCP reading and writing.

This package contains helper functions for timing, progress reporting and
metadata export.
"""
