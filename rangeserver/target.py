#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Target Resolver for Range HTTP Server
-------------------------------------
Inspects the configured path once at startup and picks the serving
strategy that matches it.
"""

import os
import stat

from .strategy import DirectoryStrategy, SingleFileStrategy

DIRECTORY = 'dir'
FILE = 'file'


class TargetError(Exception):
    """Raised when the path to serve cannot be used."""


class Target:
    """
    What the server was asked to expose: a directory tree or one file.
    """

    def __init__(self, kind, path, name, size):
        self.kind = kind
        self.path = path
        self.name = name
        self.size = size

    @property
    def is_directory(self):
        return self.kind == DIRECTORY

    def describe(self, listen):
        """
        Startup line telling what is served on which address.

        Args:
            listen: Configured listen address

        Returns:
            str: The line to log
        """
        if self.is_directory:
            return f'Serving HTTP on {listen}, dir: "{self.path}"'
        return f'Serving HTTP on {listen}, file: "{self.name}", {self.size}bytes'

    def __repr__(self):
        return f"Target(kind={self.kind!r}, path={self.path!r}, size={self.size})"


def resolve_target(path):
    """
    Classify a path as a directory or a regular file.

    The path is opened once so an unreadable target fails here rather than
    on the first request.

    Args:
        path: Filesystem path given on the command line

    Returns:
        Target: The classified target

    Raises:
        TargetError: If the path does not exist, cannot be read, or is
            neither a directory nor a regular file
    """
    try:
        st = os.stat(path)
        if stat.S_ISDIR(st.st_mode):
            os.listdir(path)
        elif stat.S_ISREG(st.st_mode):
            with open(path, 'rb'):
                pass
        else:
            raise TargetError(f"cannot serve {path!r}: not a regular file or directory")
    except OSError as e:
        raise TargetError(f"cannot serve {path!r}: {e.strerror or e}") from e

    name = os.path.basename(os.path.normpath(path))
    if stat.S_ISDIR(st.st_mode):
        return Target(DIRECTORY, path, name, st.st_size)
    return Target(FILE, path, name, st.st_size)


def create_strategy(target):
    """
    Build the serving strategy for a resolved target.
    """
    if target.is_directory:
        return DirectoryStrategy(target.path)
    return SingleFileStrategy(target.path)
