#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Range HTTP Server
-----------------
A small HTTP server that exposes either a single file or a directory tree,
logging every request with a correlation id, its status, size and latency.

- Directory mode: static file tree with index pages and listings
- Single file mode: one file for every URL, sent as an attachment
- Single byte range requests
- Multithreading
"""

__version__ = '1.0.0'

from .config import ServerConfig
from .dispatcher import Dispatcher, ConnectionCounter, ResponseWriter
from .server import WebServer
from .target import Target, TargetError, resolve_target
from .utils import setup_logging

__all__ = [
    'WebServer', 'ServerConfig', 'Dispatcher', 'ConnectionCounter', 'ResponseWriter',
    'Target', 'TargetError', 'resolve_target', 'setup_logging',
]
