#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Serving Strategies for Range HTTP Server
----------------------------------------
The two ways of answering a request, chosen once at startup:
- DirectoryStrategy: hands every request to the static file tree server
- SingleFileStrategy: always answers with one file, as a download

Both expose ``serve(response, handler)`` and are never mutated after
construction, so one instance is shared by every worker thread.
"""

import os


class DirectoryStrategy:
    """
    Serves a directory tree rooted at ``root``.
    """

    def __init__(self, root):
        self._root = os.path.abspath(root)

    @property
    def root(self):
        return self._root

    def serve(self, response, handler):
        handler.serve_tree(self._root)

    def __repr__(self):
        return f"DirectoryStrategy(root={self._root!r})"


class SingleFileStrategy:
    """
    Serves one fixed file for every request, whatever the URL.

    The response carries a ``Content-Disposition: attachment`` header so
    browsers offer to save it under its own name.
    """

    def __init__(self, full_path):
        self._full_path = os.path.abspath(full_path)
        self._disposition = f'attachment; filename="{os.path.basename(self._full_path)}"'

    @property
    def full_path(self):
        return self._full_path

    def serve(self, response, handler):
        response.add_header('Content-Disposition', self._disposition)
        handler.serve_file(self._full_path)

    def __repr__(self):
        return f"SingleFileStrategy(full_path={self._full_path!r})"
