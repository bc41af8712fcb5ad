#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Utility Module for Range HTTP Server
------------------------------------
Contains helper functions used throughout the server:
- Logging setup (colored console, rotating file)
- Listen address parsing and formatting
- Human readable durations for the access log
- Byte range header parsing
"""

import re
import logging
from logging.handlers import RotatingFileHandler

import colorama
from colorama import Fore, Style


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

BYTE_RANGE_RE = re.compile(r'bytes=(\d*)-(\d*)$')


class RangeNotSatisfiable(ValueError):
    """Raised when a byte range lies entirely outside the resource."""


class ColoredFormatter(logging.Formatter):
    """Custom formatter for colored log output."""

    FORMATS = {
        logging.DEBUG: Fore.CYAN + LOG_FORMAT + Style.RESET_ALL,
        logging.INFO: Fore.GREEN + LOG_FORMAT + Style.RESET_ALL,
        logging.WARNING: Fore.YELLOW + LOG_FORMAT + Style.RESET_ALL,
        logging.ERROR: Fore.RED + LOG_FORMAT + Style.RESET_ALL,
        logging.CRITICAL: Fore.RED + Style.BRIGHT + LOG_FORMAT + Style.RESET_ALL
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno, self.FORMATS[logging.INFO])
        formatter = logging.Formatter(log_fmt, datefmt=LOG_DATE_FORMAT)
        return formatter.format(record)


def setup_logging(log_level='INFO', log_file=None, max_size=10485760, backup_count=5, use_colored_logging=True):
    """
    Set up logging configuration.

    Args:
        log_level: Logging level (default: INFO)
        log_file: Log file path (default: None, console only)
        max_size: Maximum log file size in bytes (default: 10MB)
        backup_count: Number of backup logs to keep (default: 5)
        use_colored_logging: Whether to use colored logging in console (default: True)

    Returns:
        logging.Logger: Root logger instance
    """
    log_level_value = getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level_value)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if log_file:
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_size,
                backupCount=backup_count
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            root_logger.addHandler(file_handler)
        except OSError as e:
            print(f"Error setting up log file: {e}")

    console_handler = logging.StreamHandler()

    if use_colored_logging:
        colorama.init(autoreset=True)
        console_handler.setFormatter(ColoredFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root_logger.addHandler(console_handler)
    return root_logger


def parse_listen_address(address):
    """
    Split a listen address of the form ``host:port`` into its parts.

    An empty host (``:8080``) binds every interface. IPv6 hosts must be
    bracketed (``[::1]:8080``).

    Args:
        address: Listen address string

    Returns:
        tuple: (host, port)

    Raises:
        ValueError: If the address has no port or the port is not a number
    """
    host, sep, port = address.rpartition(':')
    if not sep:
        raise ValueError(f"missing port in address {address!r}")
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {address!r}") from None
    if not 0 <= port_number <= 65535:
        raise ValueError(f"invalid port in address {address!r}")
    return host, port_number


def format_address(address):
    """
    Format a socket address tuple as ``host:port``.
    """
    host, port = address[0], address[1]
    if ':' in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _with_fraction(value, unit):
    whole, rest = divmod(value, unit)
    if not rest:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{rest:0{digits}d}".rstrip('0')


def format_duration(nanoseconds):
    """
    Convert a duration in nanoseconds to a short human readable string.

    Sub-second values use the largest unit below the value (``ns``, ``µs``,
    ``ms``) keeping every significant digit, e.g. ``1.192874ms`` or
    ``60.777µs``. Longer values are split into hours, minutes and seconds,
    e.g. ``2m3.5s``.

    Args:
        nanoseconds: Elapsed time in nanoseconds

    Returns:
        str: Formatted duration
    """
    nanoseconds = int(nanoseconds)
    if nanoseconds == 0:
        return '0s'
    if nanoseconds < 1000:
        return f"{nanoseconds}ns"
    if nanoseconds < 1000000:
        return _with_fraction(nanoseconds, 1000) + 'µs'
    if nanoseconds < 1000000000:
        return _with_fraction(nanoseconds, 1000000) + 'ms'

    minutes, remainder = divmod(nanoseconds, 60 * 1000000000)
    hours, minutes = divmod(minutes, 60)
    seconds = _with_fraction(remainder, 1000000000) + 's'
    if hours:
        return f"{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{minutes}m{seconds}"
    return seconds


def parse_byte_range(header, size):
    """
    Parse a single ``Range: bytes=...`` header against a resource size.

    Args:
        header: Value of the Range header (may be None)
        size: Size of the resource in bytes

    Returns:
        tuple: Inclusive (start, end) offsets, or None when the header is
        absent, malformed or asks for several ranges

    Raises:
        RangeNotSatisfiable: If the range is valid but outside the resource
    """
    if not header:
        return None
    match = BYTE_RANGE_RE.match(header.strip())
    if not match:
        return None

    start_text, end_text = match.groups()
    if not start_text and not end_text:
        return None

    if not start_text:
        # suffix range: the last N bytes
        length = int(end_text)
        if length == 0 or size == 0:
            raise RangeNotSatisfiable(header)
        return max(0, size - length), size - 1

    start = int(start_text)
    if start >= size:
        raise RangeNotSatisfiable(header)
    if not end_text:
        return start, size - 1
    end = int(end_text)
    if end < start:
        return None
    return start, min(end, size - 1)
