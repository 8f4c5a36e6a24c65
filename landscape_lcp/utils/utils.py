#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility functions for LCP reading and writing.

This module provides the timing decorator used by the scanning passes and
progress-callback helpers for the pixel copy.
"""
import time
import functools
from typing import Callable, Optional

from tqdm import tqdm

from landscape_lcp.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)

ProgressCallback = Callable[[float], bool]


def timer(func: Callable) -> Callable:
    """
    Decorator to time function execution.

    Parameters
    ----------
    func : Callable
        Function to time.

    Returns
    -------
    Callable
        Wrapped function with timing.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        logger.debug(f"Function {func.__name__} took {elapsed:.2f} seconds to run")
        return result
    return wrapper


def no_progress(fraction: float) -> bool:
    """Progress callback that never cancels."""
    return True


class TqdmProgress:
    """
    Progress callback rendering a tqdm bar.

    Parameters
    ----------
    desc : str, optional
        Bar label.
    disable : bool, optional
        Hide the bar, by default False.
    """

    def __init__(self, desc: Optional[str] = None, disable: bool = False):
        self._bar = tqdm(total=100, desc=desc, unit="%", disable=disable)
        self._done = 0

    def __call__(self, fraction: float) -> bool:
        target = int(round(max(0.0, min(1.0, fraction)) * 100))
        if target > self._done:
            self._bar.update(target - self._done)
            self._done = target
        return True

    def close(self) -> None:
        self._bar.close()

    def __enter__(self) -> "TqdmProgress":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
