#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Range HTTP Server
-----------------
Serve a single file or a directory tree over HTTP.
This is the main entry point when running from a checkout.
"""

import os
import sys

# Add this directory to the path so we can import the package without installing it
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from rangeserver.__main__ import main


if __name__ == '__main__':
    sys.exit(main())
