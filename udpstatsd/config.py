"""
udpstatsd - configuration validation

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from udpstatsd.client import MessageFormat, StatsdClient
from udpstatsd.errors import InvalidConfigurationError


class StatsdConfig(BaseModel):
    # Extra values should be errors, as they are most likely typos
    # which lead to grief when not detected.
    model_config = ConfigDict(extra="forbid", validate_default=True)

    # None disables sending
    host: Optional[str] = Field("127.0.0.1", min_length=1)
    port: int = Field(8125, ge=1, le=65535)
    tags: Dict[str, Optional[str]] = Field(default_factory=dict)
    format: MessageFormat = MessageFormat.telegraf


def read_config(config):
    if isinstance(config, StatsdConfig):
        return config
    if not isinstance(config, dict):
        raise InvalidConfigurationError("statsd configuration must be a dict, not {!r}".format(type(config).__name__))
    try:
        return StatsdConfig(**config)
    except ValidationError as ex:
        raise InvalidConfigurationError("invalid statsd configuration: {}".format(ex)) from ex


def create_client(config, *, rng=None):
    """Build a StatsdClient from a monitoring config section such as
    {"host": "127.0.0.1", "port": 8125, "tags": {"site": "default"}, "format": "telegraf"}"""
    statsd_config = read_config(config)
    return StatsdClient(
        host=statsd_config.host,
        port=statsd_config.port,
        tags=dict(statsd_config.tags),
        message_format=statsd_config.format,
        rng=rng,
    )
