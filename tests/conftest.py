import logging
import socket

import pytest

from toctoc import knocker, targets
from toctoc.logger import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)


class FakeSocket:
    def __init__(self, net, family, socktype, proto):
        self.net = net
        self.family = family
        self.socktype = socktype
        self.proto = proto
        self.blocking = True
        self.closed = False

    def setblocking(self, flag):
        self.blocking = flag

    def connect_ex(self, addr):
        self.net.events.append(("connect", addr))
        return self.net.connect_errno

    def sendto(self, data, addr):
        if self.net.sendto_error is not None:
            raise self.net.sendto_error
        self.net.events.append(("sendto", data, addr))
        return len(data)

    def settimeout(self, value):
        self.timeout = value

    def connect(self, addr):
        self.net.events.append(("check", addr))
        if self.net.check_error is not None:
            raise self.net.check_error

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeNet:
    def __init__(self):
        self.sockets = []
        self.events = []
        self.selects = []
        self.sleeps = []
        self.connect_errno = 0
        self.sendto_error = None
        self.check_error = None
        self.fail_allocations = set()
        self.allocations = 0
        self.addrinfo = []
        self.getaddrinfo_calls = []

    def socket(self, family=-1, type=-1, proto=-1, fileno=None):
        self.allocations += 1
        if self.allocations in self.fail_allocations:
            raise OSError(24, "Too many open files")
        s = FakeSocket(self, family, type, proto)
        self.sockets.append(s)
        return s

    def select(self, rlist, wlist, xlist, timeout=None):
        self.selects.append(timeout)
        return [], wlist, []

    def sleep(self, seconds):
        self.events.append(("sleep", seconds))
        self.sleeps.append(seconds)

    def getaddrinfo(self, host, port, family=0, type=0, proto=0, flags=0):
        self.getaddrinfo_calls.append((host, port, family, type, proto, flags))
        return [
            info for info in self.addrinfo
            if family == socket.AF_UNSPEC or info[0] == family
        ]


def v4_info(address, socktype=socket.SOCK_STREAM):
    proto = socket.IPPROTO_UDP if socktype == socket.SOCK_DGRAM else socket.IPPROTO_TCP
    return (socket.AF_INET, socktype, proto, "", (address, 0))


def v6_info(address, socktype=socket.SOCK_STREAM):
    proto = socket.IPPROTO_UDP if socktype == socket.SOCK_DGRAM else socket.IPPROTO_TCP
    return (socket.AF_INET6, socktype, proto, "", (address, 0, 0, 0))


@pytest.fixture
def fake_net(monkeypatch):
    net = FakeNet()
    monkeypatch.setattr(knocker.socket, "socket", net.socket)
    monkeypatch.setattr(knocker.select, "select", net.select)
    monkeypatch.setattr(knocker.time, "sleep", net.sleep)
    monkeypatch.setattr(targets.socket, "getaddrinfo", net.getaddrinfo)
    return net
