import pytest

from udpstatsd.client import MessageFormat
from udpstatsd.config import StatsdConfig, create_client, read_config
from udpstatsd.errors import InvalidConfigurationError


class FixedRandom:
    def random(self):
        return 0.1


def test_defaults():
    config = read_config({})
    assert config.host == "127.0.0.1"
    assert config.port == 8125
    assert config.tags == {}
    assert config.format == MessageFormat.telegraf


def test_read_config_accepts_model():
    config = StatsdConfig(port=9125)
    assert read_config(config) is config


@pytest.mark.parametrize(
    "config", [
        {"port": 0},
        {"port": 65536},
        {"port": "not-a-port"},
        {"format": "graphite"},
        {"tags": ["foo"]},
        {"hots": "localhost"},
    ]
)
def test_invalid_config(config):
    with pytest.raises(InvalidConfigurationError):
        read_config(config)


def test_config_must_be_a_dict():
    with pytest.raises(InvalidConfigurationError):
        read_config("127.0.0.1:8125")


def test_create_client(udp_server):
    client = create_client({
        "port": udp_server.port,
        "format": "datadog",
        "tags": {
            "site": "default",
        },
    })
    with client:
        assert client.host == "127.0.0.1"
        assert client.port == udp_server.port
        client.increment("something")
    assert udp_server.get_message() == "something:1|c|#site:default"


def test_create_client_with_random_source(udp_server):
    with create_client({"port": udp_server.port}, rng=FixedRandom()) as client:
        client.decrement_with_sampling("something", 0.5)
    assert udp_server.get_message() == "something:-1|c|@0.500000"


def test_none_host_creates_disabled_client(udp_server):
    with create_client({"host": None, "port": udp_server.port}) as client:
        assert not client.is_open
        assert client.increment("something") == 0
    assert not udp_server.has_message()
