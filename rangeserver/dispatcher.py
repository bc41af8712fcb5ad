#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Instrumented Dispatcher for Range HTTP Server
---------------------------------------------
Wraps the active serving strategy with access logging. Each request gets a
sequence number, a start line, and an end line carrying the status, the
elapsed time and the size of the response body.
"""

import time
import logging
import threading

from .utils import format_address, format_duration

COUNTER_LIMIT = 2 ** 31 - 1


class ConnectionCounter:
    """
    Process-wide request counter used as a correlation id in the logs.
    """

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self):
        return self._value

    def increment(self):
        """
        Advance the counter and return the new value.

        Wraps back to 1 once it passes ``COUNTER_LIMIT``.
        """
        with self._lock:
            self._value = self._value % COUNTER_LIMIT + 1
            return self._value


class ResponseWriter:
    """
    Response sink handed to a serving strategy.

    Forwards body writes to the client stream while recording the status
    code and the size of the last write. ``length`` is the length of the
    most recent ``write`` call rather than a running total; static files
    usually go out in one write.
    """

    def __init__(self, stream):
        self.stream = stream
        self.headers = []
        self.status = 0
        self.length = 0

    def add_header(self, keyword, value):
        """Queue a header to be sent with the status line."""
        self.headers.append((keyword, value))

    def write_header(self, status):
        # only the first status reaches the client, keep that one
        if not self.status:
            self.status = int(status)

    def write(self, data):
        written = self.stream.write(data)
        self.length = len(data) if written is None else written
        return written

    def flush(self):
        self.stream.flush()


class Dispatcher:
    """
    Runs every request through the serving strategy, logging around it.
    """

    def __init__(self, strategy, counter=None, server_name='range-http-server'):
        """
        Initialize the dispatcher.

        Args:
            strategy: Serving strategy answering the requests
            counter: Shared ConnectionCounter (a new one if None)
            server_name: Value of the Server response header
        """
        self.strategy = strategy
        self.counter = counter if counter is not None else ConnectionCounter()
        self.server_name = server_name
        self.logger = logging.getLogger('Dispatcher')

    def dispatch(self, handler):
        """
        Serve one request.

        Args:
            handler: RequestHandler holding the parsed request

        Returns:
            ResponseWriter: The captured status and length
        """
        idx = self.counter.increment()
        self.logger.info("[%d] >>> %s - %s - %s",
                         idx, handler.command, format_address(handler.client_address), handler.path)

        response = ResponseWriter(handler.wfile)
        response.add_header('Server', self.server_name)

        handler.begin_response(response)
        start_time = time.perf_counter_ns()
        try:
            self.strategy.serve(response, handler)
        except ConnectionError as e:
            handler.close_connection = True
            self.logger.warning("[%d] Connection error: %s", idx, e)
        finally:
            elapsed = time.perf_counter_ns() - start_time
            handler.end_response()
            self.logger.info("[%d] <<< %d %s %dbytes",
                             idx, response.status, format_duration(elapsed), response.length)
        return response
