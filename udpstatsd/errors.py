"""
udpstatsd - exception classes

Copyright (c) 2015 Ohmu Ltd
See LICENSE for details
"""


class Error(Exception):
    """Generic udpstatsd exception"""


class InvalidConfigurationError(Error):
    """Invalid configuration"""


class SocketOpenError(Error):
    """Could not open the UDP socket towards the statsd daemon"""


class SendError(Error):
    """One or more datagram writes failed"""

    def __init__(self, failures, sent=0):
        self.failures = failures
        self.sent = sent
        names = ", ".join(stat for stat, _ in failures)
        super().__init__("failed to send {} metric(s): {}".format(len(failures), names))
