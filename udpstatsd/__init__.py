"""
udpstatsd - StatsD client sending metrics as UDP datagrams

Copyright (c) 2015 Ohmu Ltd
See LICENSE for details
"""
from .client import MessageFormat, StatsdClient
from .config import StatsdConfig, create_client
from .errors import (Error, InvalidConfigurationError, SendError, SocketOpenError)
from .version import __version__

__all__ = [
    "Error",
    "InvalidConfigurationError",
    "MessageFormat",
    "SendError",
    "SocketOpenError",
    "StatsdClient",
    "StatsdConfig",
    "__version__",
    "create_client",
    "new",
]


def new(host, port):
    """Open a client towards the statsd daemon at host:port

    client = udpstatsd.new("localhost", 8125)
    client.increment("foo.bar")
    """
    return StatsdClient(host, port)
