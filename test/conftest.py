"""
udpstatsd: fixtures for tests

Copyright (c) 2015 Ohmu Ltd
See LICENSE for details
"""
import selectors
import socket
from types import TracebackType
from typing import Callable, Iterator, List, Type

import pytest

from udpstatsd import logutil

logutil.configure_logging()


def port_is_listening(hostname: str, port: int) -> bool:
    # a bind failure means something already owns the port
    sock = socket.socket(family=socket.AF_INET, type=socket.SOCK_DGRAM)
    try:
        sock.bind((hostname, port))
        return False
    except OSError:
        return True
    finally:
        sock.close()


@pytest.fixture(scope="session", name="get_available_port")
def fixture_get_available_port() -> Callable[[], int]:
    first_free_port = 30000

    def get_available_port():
        nonlocal first_free_port
        port = first_free_port
        while port < 40000:
            if not port_is_listening("127.0.0.1", port):
                first_free_port = port + 1
                return port
            port += 1
        raise RuntimeError("No available port")

    return get_available_port


class UdpServer:
    def __init__(self, port: int) -> None:
        self.port = port
        self.socket = socket.socket(family=socket.AF_INET, type=socket.SOCK_DGRAM)

    def __enter__(self) -> "UdpServer":
        self.socket.bind(("127.0.0.1", self.port))
        self.socket.settimeout(5.0)
        return self

    def __exit__(self, exc_type: Type, exc_val: BaseException, exc_tb: TracebackType) -> None:
        self.socket.close()

    def has_message(self, timeout: float = 0.2) -> bool:
        selector = selectors.DefaultSelector()
        selector.register(self.socket, selectors.EVENT_READ)
        try:
            return len(selector.select(timeout=timeout)) > 0
        finally:
            selector.unregister(self.socket)
            selector.close()

    def get_message(self) -> str:
        return self.socket.recv(2048).decode()

    def get_messages(self) -> List[str]:
        messages = []
        while self.has_message():
            messages.append(self.get_message())
        return messages


@pytest.fixture(name="udp_server")
def fixture_udp_server(get_available_port: Callable[[], int]) -> Iterator[UdpServer]:
    with UdpServer(port=get_available_port()) as udp_server:
        yield udp_server
