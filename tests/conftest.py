"""Test configuration and fixtures for Socket Tester tests."""
import os
import sys
import asyncio
import tempfile
from typing import Any, Dict, List, Optional

import pytest
import socketio
import pytest_asyncio
from aiohttp import web

# Keep config and log files out of the source tree
os.environ.setdefault("SOCKET_TESTER_HOME", tempfile.mkdtemp(prefix="socket-tester-"))

# Add application root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sockettester.core import SocketTestController, TransportSignal
from sockettester.core.exceptions import SendError, TransportError
from sockettester.transport.base import Transport

TEST_HOST = "127.0.0.1"
TEST_PORT = 5349  # Different port from a locally running dev server


class FakeTransport(Transport):
    """In-memory transport that records every call made on it."""

    def __init__(self, fail_open: bool = False, fail_close: bool = False, fail_emit: bool = False):
        super().__init__()
        self.fail_open = fail_open
        self.fail_close = fail_close
        self.fail_emit = fail_emit
        self.is_connected = False
        self.opened_with: Optional[tuple] = None
        self.close_calls = 0
        self.emitted: List[tuple] = []
        self.handlers: Dict[str, Any] = {}
        self.on_calls: List[str] = []
        self.off_calls: List[str] = []

    @property
    def connected(self) -> bool:
        return self.is_connected

    async def open(self, url, options=None):
        if self.fail_open:
            raise TransportError("could not start")
        self.opened_with = (url, options)

    async def close(self):
        self.close_calls += 1
        self.is_connected = False
        if self.fail_close:
            raise TransportError("close failed")

    async def emit(self, event, payload=None):
        if self.fail_emit:
            raise SendError(event, "rejected")
        self.emitted.append((event, payload))

    def on(self, event, handler):
        self.on_calls.append(event)
        self.handlers[event] = handler

    def off(self, event):
        self.off_calls.append(event)
        self.handlers.pop(event, None)

    def fire(self, signal: TransportSignal, detail: Any = None) -> None:
        """Simulate a lifecycle signal from the underlying client."""
        if signal in (TransportSignal.OPEN, TransportSignal.RECONNECT_SUCCESS):
            self.is_connected = True
        elif signal in (TransportSignal.CLOSE, TransportSignal.RECONNECT_ATTEMPT):
            self.is_connected = False
        self._signal(signal, detail)

    def receive(self, event: str, data: Any = None) -> None:
        """Simulate a server event arriving."""
        handler = self.handlers.get(event)
        if handler is not None:
            handler(data)


class FakeTransportFactory:
    """Transport factory handing out FakeTransports and remembering them."""

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.created: List[FakeTransport] = []

    def __call__(self) -> FakeTransport:
        transport = FakeTransport(**self.kwargs)
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]


@pytest.fixture
def transport_factory():
    return FakeTransportFactory()


@pytest.fixture
def controller(transport_factory):
    """Controller with no default listeners, backed by fake transports."""
    return SocketTestController(transport_factory=transport_factory)


@pytest_asyncio.fixture
async def connected_controller(controller, transport_factory):
    """Controller whose transport has reported that it is open."""
    assert await controller.connect("http://localhost:3000")
    transport_factory.last.fire(TransportSignal.OPEN)
    yield controller
    await controller.shutdown()


async def wait_for(predicate, timeout: float = 5.0, interval: float = 0.05) -> bool:
    """Poll until predicate() is true or the timeout expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


@pytest.fixture
def test_config():
    """Provide test configuration."""
    return {
        "connection": {
            "default_url": f"http://{TEST_HOST}:{TEST_PORT}",
        },
        "transport": {
            "transports": ["websocket"],
            "wait_timeout": 5,
            "reconnection": False,
            "retry_initial_connect": False,
        },
    }


@pytest_asyncio.fixture
async def server_app(test_config):
    """Provide a Socket.IO test server that echoes events back to the sender."""
    sio = socketio.AsyncServer(async_mode='aiohttp', logger=False, engineio_logger=False)
    app = web.Application()
    sio.attach(app)

    @sio.event
    async def connect(sid, environ, auth=None):
        await sio.emit('welcome', {'sid': sid}, to=sid)

    @sio.on('echo')
    async def echo(sid, data=None):
        await sio.emit('echo', data, to=sid)

    @sio.on('kick')
    async def kick(sid, data=None):
        await sio.disconnect(sid)

    runner = None
    try:
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, TEST_HOST, TEST_PORT)
        await site.start()

        yield sio, test_config['connection']['default_url']
    finally:
        if runner:
            await runner.cleanup()
