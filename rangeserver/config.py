#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Configuration Module for Range HTTP Server
------------------------------------------
Handles loading and managing server configuration from various sources:
- Default configuration
- Configuration file (JSON)
- Command-line arguments
"""

import json
import logging
import argparse

from . import __version__


class ServerConfig:
    """
    Server configuration manager.

    Loads and provides access to server configuration settings from various sources,
    with the following precedence (highest to lowest):
    1. Command-line arguments
    2. Configuration file
    3. Default values
    """

    DEFAULT_CONFIG = {
        "listen": "0.0.0.0:2016",
        "path": ".",
        "log_level": "INFO",
        "log_file": None,
        "log_max_size": 10485760,  # 10 MB
        "log_backup_count": 5,
        "colored_logging": True,
        "max_threads": 32,
        "connection_queue": 128,
        "request_timeout": None,  # None means the socket never times out
        "server_name": f"range-http-server/{__version__}",
    }

    def __init__(self, config_file=None, **kwargs):
        """
        Initialize the configuration with values from file and kwargs.

        Args:
            config_file: Path to the configuration file
            **kwargs: Additional configuration parameters that override file values
        """
        self._config = self.DEFAULT_CONFIG.copy()
        self.logger = logging.getLogger('Config')

        if config_file:
            self.load_from_file(config_file)

        for key, value in kwargs.items():
            self._config[key] = value

    def load_from_file(self, config_path="config.json"):
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file (default: config.json)

        Returns:
            bool: True if loaded successfully, False otherwise
        """
        try:
            with open(config_path, 'r') as f:
                file_config = json.load(f)
        except FileNotFoundError:
            self.logger.warning(f"Configuration file {config_path} not found. Using defaults.")
            return False
        except (OSError, ValueError) as e:
            self.logger.error(f"Error loading configuration: {e}")
            return False

        if not isinstance(file_config, dict):
            self.logger.error(f"Error loading configuration: {config_path} does not hold an object")
            return False

        self._config.update(file_config)
        self.logger.info(f"Loaded configuration from {config_path}")
        return True

    def save_to_file(self, config_path="config.json"):
        """
        Save current configuration to a JSON file.

        Args:
            config_path: Path to save the configuration file (default: config.json)

        Returns:
            bool: True if saved successfully, False otherwise
        """
        try:
            with open(config_path, 'w') as f:
                json.dump(self._config, f, indent=4)
        except OSError as e:
            self.logger.error(f"Error saving configuration: {e}")
            return False
        self.logger.info(f"Configuration saved to {config_path}")
        return True

    def load_from_args(self, args=None):
        """
        Parse command line arguments and update configuration.

        Args:
            args: Command line arguments to parse (default: None, uses sys.argv)

        Returns:
            argparse.Namespace: Parsed arguments
        """
        parser = argparse.ArgumentParser(
            prog='range-http-server',
            description='Serve a single file or a directory tree over HTTP'
        )
        parser.add_argument('-l', '--listen',
                            help='Listen address host:port (default: 0.0.0.0:2016)')
        parser.add_argument('-p', '--path',
                            help='File or directory to serve (default: current directory)')
        parser.add_argument('-c', '--config',
                            help='Path to JSON configuration file')
        parser.add_argument('--log-level',
                            choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                            help='Logging level')
        parser.add_argument('--log-file',
                            help='Also log to this file, rotated at 10 MB')
        parser.add_argument('--no-color', action='store_true',
                            help='Disable colored logging')
        parser.add_argument('--max-threads', type=int,
                            help='Maximum number of worker threads')
        parser.add_argument('--request-timeout', type=float,
                            help='Socket timeout in seconds for client connections')

        parsed_args = parser.parse_args(args)

        # The file sits below the command line in precedence
        if parsed_args.config:
            self.load_from_file(parsed_args.config)

        if parsed_args.listen:
            self._config['listen'] = parsed_args.listen
        if parsed_args.path:
            self._config['path'] = parsed_args.path
        if parsed_args.log_level:
            self._config['log_level'] = parsed_args.log_level
        if parsed_args.log_file:
            self._config['log_file'] = parsed_args.log_file
        if parsed_args.no_color:
            self._config['colored_logging'] = False
        if parsed_args.max_threads:
            self._config['max_threads'] = parsed_args.max_threads
        if parsed_args.request_timeout:
            self._config['request_timeout'] = parsed_args.request_timeout

        return parsed_args

    def get(self, key, default=None):
        """
        Get a configuration value.

        Args:
            key: Configuration key
            default: Default value if key is not found

        Returns:
            Value for the key or default if not found
        """
        return self._config.get(key, default)

    def set(self, key, value):
        self._config[key] = value

    def get_all(self):
        return self._config.copy()

    # Property accessors for common configuration values
    @property
    def listen(self):
        return self.get('listen')

    @property
    def path(self):
        return self.get('path')

    @property
    def log_level(self):
        return self.get('log_level')

    @property
    def log_file(self):
        return self.get('log_file')

    @property
    def log_max_size(self):
        return self.get('log_max_size')

    @property
    def log_backup_count(self):
        return self.get('log_backup_count')

    @property
    def colored_logging(self):
        return self.get('colored_logging')

    @property
    def max_threads(self):
        return self.get('max_threads')

    @property
    def connection_queue(self):
        return self.get('connection_queue')

    @property
    def request_timeout(self):
        return self.get('request_timeout')

    @property
    def server_name(self):
        return self.get('server_name')


def init_config(args=None):
    """
    Initialize configuration from command line arguments.

    Args:
        args: Command line arguments (default: None, uses sys.argv)

    Returns:
        ServerConfig: Configuration instance
    """
    config = ServerConfig()
    config.load_from_args(args)
    return config
