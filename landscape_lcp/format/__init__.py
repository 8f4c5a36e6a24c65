#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LCP format internals.

Header layout tables, the header codec, band classification and the unit,
latitude and linear-unit resolvers used when writing.
"""
