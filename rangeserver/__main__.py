#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command line entry point for Range HTTP Server.

    range-http-server -l :8888 -p /path/to/file
    range-http-server -l :8888 -p /path/to/dir
"""

import sys
import logging

from .config import init_config
from .server import WebServer
from .target import TargetError
from .utils import setup_logging


def main(args=None):
    """
    Main entry point for the server.

    Args:
        args: Command line arguments (default: None, uses sys.argv)

    Returns:
        int: Process exit code
    """
    config = init_config(args)

    setup_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        max_size=config.log_max_size,
        backup_count=config.log_backup_count,
        use_colored_logging=config.colored_logging
    )

    try:
        server = WebServer(config)
    except TargetError as e:
        logging.getLogger('WebServer').critical(str(e))
        return 1

    if not server.start():
        return 1

    server.wait_for_shutdown()
    return 0


if __name__ == '__main__':
    sys.exit(main())
