#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
HTTP Request Handler Module for Range HTTP Server
-------------------------------------------------
Parses one HTTP request per connection and transfers files with
``http.server``. On top of the standard library behaviour it adds:
- Serving one fixed file whatever the URL
- Single byte range requests (206 / 416)
- Hooks so the dispatcher sees every status and body write
"""

import os
import logging
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler

from .utils import parse_byte_range, RangeNotSatisfiable

COPY_BUFSIZE = 64 * 1024


class RequestHandler(SimpleHTTPRequestHandler):
    """
    Handles HTTP requests for a WebServer.

    Every request method goes through the server's dispatcher, which
    picks what to serve through its strategy and calls back into
    ``serve_tree`` or ``serve_file``.
    """

    response = None
    fixed_path = None
    range_length = None

    def __init__(self, *args, **kwargs):
        self.logger = logging.getLogger('RequestHandler')
        super().__init__(*args, **kwargs)

    def do_GET(self):
        self.server.dispatcher.dispatch(self)

    do_HEAD = do_POST = do_PUT = do_DELETE = do_PATCH = do_OPTIONS = do_GET

    def __getattr__(self, name):
        # http.server looks up do_<METHOD>; every other method is dispatched too
        if name.startswith('do_'):
            return self.do_GET
        raise AttributeError(name)

    def serve_tree(self, root):
        """
        Answer the request from the directory tree under ``root``.
        """
        self.directory = os.fspath(root)
        self.fixed_path = None
        self.send_file()

    def serve_file(self, path):
        """
        Answer the request with the file at ``path``, ignoring the URL.
        """
        self.fixed_path = os.fspath(path)
        self.send_file()

    def send_file(self):
        f = self.send_head()
        if f:
            try:
                if self.command != 'HEAD':
                    self.copyfile(f, self.wfile)
            finally:
                f.close()

    def translate_path(self, path):
        if self.fixed_path is not None:
            return self.fixed_path
        return super().translate_path(path)

    def _range_applies(self, fs):
        """
        Whether a Range header may be answered with a partial response.

        Conditional GETs go through the stock code so 304 stays available,
        and an If-Range that does not match the file's Last-Modified date
        means the client gets the whole file.
        """
        if 'If-Modified-Since' in self.headers or 'If-None-Match' in self.headers:
            return False
        if_range = self.headers.get('If-Range')
        if if_range is not None and if_range.strip() != self.date_time_string(fs.st_mtime):
            return False
        return True

    def send_head(self):
        """
        Send the response headers, honouring a single byte range.

        Returns:
            A file object positioned at the first byte to send, or None
        """
        self.range_length = None
        path = self.translate_path(self.path)
        if 'Range' not in self.headers or not os.path.isfile(path):
            return super().send_head()

        try:
            f = open(path, 'rb')
        except OSError:
            self.send_error(HTTPStatus.NOT_FOUND, "File not found")
            return None

        try:
            fs = os.fstat(f.fileno())
            if not self._range_applies(fs):
                f.close()
                return super().send_head()

            try:
                byte_range = parse_byte_range(self.headers['Range'], fs.st_size)
            except RangeNotSatisfiable:
                f.close()
                self.send_response(HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE)
                self.send_header("Content-type", self.guess_type(path))
                self.send_header("Content-Range", f"bytes */{fs.st_size}")
                self.send_header("Content-Length", "0")
                self.end_headers()
                return None

            if byte_range is None:
                f.close()
                return super().send_head()

            start, end = byte_range
            self.send_response(HTTPStatus.PARTIAL_CONTENT)
            self.send_header("Content-type", self.guess_type(path))
            self.send_header("Content-Range", f"bytes {start}-{end}/{fs.st_size}")
            self.send_header("Content-Length", str(end - start + 1))
            self.send_header("Last-Modified", self.date_time_string(fs.st_mtime))
            self.end_headers()
            f.seek(start)
            self.range_length = end - start + 1
            return f
        except Exception:
            f.close()
            raise

    def copyfile(self, source, outputfile):
        if self.range_length is None:
            super().copyfile(source, outputfile)
            return

        remaining = self.range_length
        while remaining > 0:
            chunk = source.read(min(COPY_BUFSIZE, remaining))
            if not chunk:
                break
            outputfile.write(chunk)
            remaining -= len(chunk)

    def begin_response(self, response):
        """
        Route status and body writes through ``response`` until end_response.
        """
        self.response = response
        self.wfile = response

    def end_response(self):
        if self.response is not None:
            self.wfile = self.response.stream
            self.response = None

    def send_response(self, code, message=None):
        if self.response is None:
            super().send_response(code, message)
            return

        self.log_request(code)
        self.send_response_only(code, message)
        self.send_header('Date', self.date_time_string())
        for keyword, value in self.response.headers:
            self.send_header(keyword, value)

    def send_response_only(self, code, message=None):
        if self.response is not None:
            self.response.write_header(code)
        super().send_response_only(code, message)

    def flush_headers(self):
        if self.response is None:
            super().flush_headers()
            return

        # header bytes skip the capture so only the body is measured
        self.wfile = self.response.stream
        try:
            super().flush_headers()
        finally:
            self.wfile = self.response

    def version_string(self):
        return self.server.dispatcher.server_name

    def log_message(self, format, *args):
        self.logger.debug("%s - %s", self.address_string(), format % args)
