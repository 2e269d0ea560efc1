"""
StatsD client

Sends counters, gauges and timings as one UDP datagram per metric:

  <metric-name>:<value>|<type>[|@<sample-rate>]

Supports telegraf's statsd protocol extension for 'key=value' tags:

  https://github.com/influxdata/telegraf/tree/master/plugins/inputs/statsd

and the datadog '|#tag:value' extension:

  http://docs.datadoghq.com/guides/dogstatsd/#datagram-format

"""
import enum
import logging
import random
import socket
import threading
import time
from typing import Dict, Iterable, Mapping, Optional, Union

from udpstatsd.errors import SendError, SocketOpenError

LOG = logging.getLogger(__name__)

Tags = Optional[Dict[str, Optional[str]]]


@enum.unique
class MessageFormat(str, enum.Enum):
    telegraf = "telegraf"
    datadog = "datadog"

    def __str__(self):
        return str(self.value)


class StatsdClient:
    def __init__(self, host="127.0.0.1", port=8125, *, tags=None, message_format=MessageFormat.telegraf, rng=None):
        self._host = host
        self._port = port
        self._tags = tags or {}
        self._message_format = MessageFormat(message_format)
        self._random = rng or random.Random()
        self._lock = threading.Lock()
        self._socket = None
        if host is None:
            # stats sending is disabled
            return
        try:
            self.open()
        except SocketOpenError as ex:
            LOG.error("Could not open statsd socket: %s", ex)

    @property
    def host(self):
        return self._host

    @property
    def port(self):
        return self._port

    @property
    def is_open(self):
        return self._socket is not None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.close()

    def open(self):
        if self._socket is not None:
            return
        if not isinstance(self._host, str) or not self._host:
            raise SocketOpenError("invalid statsd host {!r}".format(self._host))
        if isinstance(self._port, bool) or not isinstance(self._port, int) or not 1 <= self._port <= 65535:
            raise SocketOpenError("invalid statsd port {!r}".format(self._port))
        try:
            family, socktype, proto, _, addr = socket.getaddrinfo(self._host, self._port, type=socket.SOCK_DGRAM)[0]
            sock = socket.socket(family, socktype, proto)
        except (OSError, UnicodeError) as ex:
            raise SocketOpenError("{}:{}: {}".format(self._host, self._port, ex)) from ex
        try:
            sock.connect(addr)
        except OSError as ex:
            sock.close()
            raise SocketOpenError("{}:{}: {}".format(self._host, self._port, ex)) from ex
        self._socket = sock
        LOG.debug("Opened statsd socket to %s:%s", self._host, self._port)

    def close(self):
        with self._lock:
            if self._socket is None:
                return
            self._socket.close()
            self._socket = None

    def timing(self, stat: str, millis: int, tags: Tags = None) -> int:
        """Log timing information (in milliseconds) without sampling"""
        return self.send({stat: "{}|ms".format(millis)}, 1, tags=tags)

    def timing_with_sample_rate(self, stat: str, millis: int, sample_rate: float, tags: Tags = None) -> int:
        return self.send({stat: "{}|ms".format(millis)}, sample_rate, tags=tags)

    def timing_since(self, stat: str, start: float, sample_rate: float = 1, tags: Tags = None) -> int:
        """Log the milliseconds elapsed since `start`, a time.time() value"""
        millis = int((time.time() - start) * 1000)
        return self.timing_with_sample_rate(stat, millis, sample_rate, tags=tags)

    def increment(self, stat: str, tags: Tags = None) -> int:
        return self.update_stats([stat], 1, 1, "c", tags=tags)

    def increment_with_sampling(self, stat: str, sample_rate: float, tags: Tags = None) -> int:
        return self.update_stats([stat], 1, sample_rate, "c", tags=tags)

    def increment_by_value(self, stat: str, value: int, tags: Tags = None) -> int:
        return self.update_stats([stat], value, 1, "c", tags=tags)

    def decrement(self, stat: str, tags: Tags = None) -> int:
        return self.update_stats([stat], -1, 1, "c", tags=tags)

    def decrement_with_sampling(self, stat: str, sample_rate: float, tags: Tags = None) -> int:
        return self.update_stats([stat], -1, sample_rate, "c", tags=tags)

    def counter(self, stat: str, value: int, tags: Tags = None) -> int:  # pylint: disable=unused-argument
        # value is not used, a counter() call always counts one
        return self.update_stats([stat], 1, 1, "c", tags=tags)

    def gauge(self, stat: str, value: Union[int, float], tags: Tags = None) -> int:
        return self.send({stat: "{}|g".format(value)}, 1, tags=tags)

    def gauge_with_sampling(self, stat: str, value: Union[int, float], sample_rate: float, tags: Tags = None) -> int:
        return self.send({stat: "{}|g".format(value)}, sample_rate, tags=tags)

    def unexpected_exception(self, ex: Exception, where: str, tags: Tags = None) -> int:
        all_tags = {
            "exception": ex.__class__.__name__,
            "where": where,
        }
        all_tags.update(tags or {})
        return self.increment("exception", tags=all_tags)

    def update_stats(
        self,
        stats: Union[str, Iterable[str]],
        delta: Union[int, float],
        sample_rate: float,
        metric_type: str,
        tags: Tags = None,
    ) -> int:
        """Update every stat in `stats` by `delta`, all sharing one sample rate"""
        if isinstance(stats, str):
            stats = [stats]
        data = {stat: "{}|{}".format(delta, metric_type) for stat in stats}
        return self.send(data, sample_rate, tags=tags)

    def send(self, data: Mapping[str, str], sample_rate: float = 1, tags: Tags = None) -> int:
        """Send `data` to the statsd daemon, logging any failures.

        Returns the number of datagrams written, never raises.
        """
        try:
            return self.transmit(data, sample_rate, tags=tags)
        except SendError as ex:
            for stat, error in ex.failures:
                LOG.error("Unexpected exception in statsd send of %r: %s: %s", stat, error.__class__.__name__, error)
            return ex.sent

    def transmit(self, data: Mapping[str, str], sample_rate: float = 1, tags: Tags = None) -> int:
        """Send `data` to the statsd daemon, one datagram per stat.

        A sample rate below 1 makes one random draw for the whole of `data`:
        either every stat is sent with an '|@<rate>' suffix or none is.
        Every write is attempted; SendError is raised afterwards if any of
        them failed.
        """
        if self._host is None:
            return 0

        with self._lock:
            if not sample_rate >= 1:
                # NaN and rates of zero or less are never sent
                if not sample_rate > 0 or self._random.random() > sample_rate:
                    return 0
                sampled_data = {stat: "{}|@{:f}".format(value, sample_rate) for stat, value in data.items()}
            else:
                sampled_data = data

            sent = 0
            failures = []
            for stat, value in sampled_data.items():
                try:
                    line = self._format_line(stat, value, tags)
                    if self._socket is None:
                        raise OSError("statsd socket is not open")
                    self._socket.send(line)
                except (OSError, UnicodeError) as ex:
                    failures.append((stat, ex))
                else:
                    sent += 1

        if failures:
            raise SendError(failures, sent=sent)
        return sent

    def _format_line(self, stat, value, tags):
        # telegraf format: "user.logins,service=payroll,region=us-west:1|c"
        # datadog format: metric.name:value|type|@sample_rate|#tag1:value,tag2
        send_tags = self._tags.copy()
        send_tags.update(tags or {})
        parts = [stat.encode("utf-8")]
        if self._message_format == MessageFormat.telegraf:
            for tag, val in sorted(send_tags.items()):
                parts.append(",{}={}".format(tag, val).encode("utf-8"))
            parts.extend([b":", value.encode("utf-8")])
        else:
            parts.extend([b":", value.encode("utf-8")])
            for index, (tag, val) in enumerate(sorted(send_tags.items())):
                separator = "|#" if index == 0 else ","
                if val is None:
                    parts.append("{}{}".format(separator, tag).encode("utf-8"))
                else:
                    parts.append("{}{}:{}".format(separator, tag, val).encode("utf-8"))
        return b"".join(parts)
