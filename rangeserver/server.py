#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Range HTTP Server Main Module
-----------------------------
Binds the listen address and hands every accepted connection to a worker
thread, which runs it through the dispatcher.
"""

import socket
import threading
import time
import logging
import signal
from concurrent.futures import ThreadPoolExecutor

from .config import ServerConfig
from .dispatcher import Dispatcher
from .handler import RequestHandler
from .target import resolve_target, create_strategy
from .utils import parse_listen_address, format_address


class WebServer:
    """
    Web server class that accepts connections and routes them through the
    dispatcher wrapping the process-lifetime serving strategy.
    """

    ACCEPT_POLL_INTERVAL = 0.5

    def __init__(self, config=None, **kwargs):
        """
        Initialize the web server.

        Args:
            config: ServerConfig instance (a default one if None)
            **kwargs: Configuration values overriding ``config``

        Raises:
            TargetError: If the path to serve cannot be used
        """
        self.config = config if config is not None else ServerConfig()
        for key, value in kwargs.items():
            self.config.set(key, value)

        self.logger = logging.getLogger('WebServer')

        self.target = resolve_target(self.config.path)
        self.strategy = create_strategy(self.target)
        self.dispatcher = Dispatcher(self.strategy, server_name=self.config.server_name)
        self.logger.info(self.target.describe(self.config.listen))

        # Server state
        self.server_socket = None
        self.is_running = False
        self._accept_thread = None
        self.thread_pool = None

    def _signal_handler(self, sig, frame):
        """
        Handle termination signals gracefully.

        Args:
            sig: Signal number
            frame: Current stack frame
        """
        self.logger.info(f"Received signal {sig}, shutting down...")
        self.is_running = False

    @property
    def address(self):
        """
        The (host, port) the server is bound to, or None before start().
        """
        if self.server_socket is None:
            return None
        return self.server_socket.getsockname()[:2]

    def start(self):
        """
        Bind the listen address and start accepting connections.

        Returns:
            bool: True if the server is listening, False if binding failed
        """
        if self.is_running:
            self.logger.warning("Server is already running")
            return True

        try:
            host, port = parse_listen_address(self.config.listen)
            family = socket.AF_INET6 if ':' in host else socket.AF_INET

            self.server_socket = socket.socket(family, socket.SOCK_STREAM)
            self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self.server_socket.bind((host, port))
            self.server_socket.listen(self.config.connection_queue)
            # Wake up periodically so shutdown() is noticed
            self.server_socket.settimeout(self.ACCEPT_POLL_INTERVAL)
        except (OSError, ValueError) as e:
            self.logger.error(f"Error starting server on {self.config.listen}: {e}")
            if self.server_socket:
                self.server_socket.close()
                self.server_socket = None
            return False

        self.thread_pool = ThreadPoolExecutor(
            max_workers=self.config.max_threads,
            thread_name_prefix="WebServerWorker"
        )
        self.is_running = True
        self.logger.debug(f"Listening on {format_address(self.address)}")

        self._accept_thread = threading.Thread(
            target=self._accept_connections,
            name="WebServerAccept",
            daemon=True
        )
        self._accept_thread.start()
        return True

    def shutdown(self):
        """
        Stop accepting connections and wait for in-flight requests.
        """
        if self.server_socket is None:
            return

        self.logger.info("Shutting down server...")
        self.is_running = False

        if self._accept_thread is not None and self._accept_thread is not threading.current_thread():
            self._accept_thread.join(timeout=self.ACCEPT_POLL_INTERVAL * 4)
        self._accept_thread = None

        self.server_socket.close()
        self.server_socket = None

        self.logger.debug("Shutting down thread pool...")
        self.thread_pool.shutdown(wait=True)
        self.logger.info("Server shutdown complete")

    def _accept_connections(self):
        """
        Accept incoming connections.
        """
        while self.is_running:
            try:
                client_socket, client_address = self.server_socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self.is_running:
                    self.logger.error(f"Error accepting connection: {e}")
                    # Sleep a bit to prevent CPU spinning on repeated errors
                    time.sleep(0.1)
                continue

            client_socket.settimeout(self.config.request_timeout)
            self.thread_pool.submit(self._handle_client, client_socket, client_address)

    def _handle_client(self, client_socket, client_address):
        """
        Handle client connection.

        Args:
            client_socket: Client socket object
            client_address: Client address tuple (ip, port)
        """
        try:
            RequestHandler(client_socket, client_address, self)
        except Exception as e:
            self.logger.error(f"Error handling client {format_address(client_address)}: {e}")
        finally:
            try:
                client_socket.shutdown(socket.SHUT_WR)
            except OSError:
                pass
            client_socket.close()

    def wait_for_shutdown(self):
        """
        Block until a termination signal arrives, then shut down.
        """
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)
        try:
            while self.is_running:
                time.sleep(1)
        except KeyboardInterrupt:
            self.logger.info("Received keyboard interrupt, shutting down...")
        finally:
            self.shutdown()
