"""Pytest configuration and shared fakes"""

import pytest

from ditloop.errors import ExternalProcessError
from ditloop.ipc import IpcMessage
from ditloop.telemetry import metrics


@pytest.fixture(autouse=True)
def reset_metrics():
    """Every test starts with empty counters."""
    metrics.reset()
    yield
    metrics.reset()


class FakeTmux:
    """In-memory stand-in for TmuxClient.

    Pane ids are issued as "%0", "%1", ... in creation order. Every call is
    recorded as a tuple (method, *args). `fail[method] = n` lets the next n
    calls of that method succeed and fails every one after that.
    """

    def __init__(self):
        self.calls: list[tuple] = []
        self.fail: dict[str, int] = {}
        self.sessions: set[str] = set()
        self.roles: dict[str, str] = {}
        self._next_id = 0

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        if method in self.fail:
            if self.fail[method] <= 0:
                raise ExternalProcessError(["tmux", method], 1, "injected failure")
            self.fail[method] -= 1

    def _new_pane(self) -> str:
        pane_id = f"%{self._next_id}"
        self._next_id += 1
        self.roles[pane_id] = ""
        return pane_id

    def calls_to(self, method: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == method]

    async def has_session(self, name):
        self._record("has_session", name)
        return name in self.sessions

    async def kill_session(self, name=None):
        self._record("kill_session", name)
        self.sessions.discard(name)

    async def create_session(self, name, cwd=None):
        self._record("create_session", name, cwd)
        self.sessions.add(name)
        return self._new_pane()

    async def create_pane(self, options):
        self._record("create_pane", options)
        return self._new_pane()

    async def kill_pane(self, pane_id):
        self._record("kill_pane", pane_id)
        self.roles.pop(pane_id, None)

    async def select_pane(self, pane_id):
        self._record("select_pane", pane_id)

    async def resize_pane(self, pane_id, dims):
        self._record("resize_pane", pane_id, dims)

    async def send_keys(self, pane_id, text, enter=True):
        self._record("send_keys", pane_id, text)

    async def rename_pane(self, pane_id, name):
        self._record("rename_pane", pane_id, name)

    async def set_pane_role(self, pane_id, role):
        self._record("set_pane_role", pane_id, role)
        self.roles[pane_id] = role

    async def bind_key(self, key, command):
        self._record("bind_key", key, command)

    async def list_panes(self, target=None):
        self._record("list_panes", target)
        return [
            {"pane_id": pid, "index": i, "width": 80, "height": 24, "active": i == 0, "role": role}
            for i, (pid, role) in enumerate(self.roles.items())
        ]


class FakeIpcServer:
    """IpcServer stand-in recording lifecycle and broadcasts."""

    def __init__(self, socket_path: str = "/tmp/fake.sock"):
        self.socket_path = socket_path
        self.started = False
        self.stopped = False
        self.broadcasts: list[IpcMessage] = []

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True

    def broadcast(self, message: IpcMessage) -> int:
        self.broadcasts.append(message)
        return 1


@pytest.fixture
def fake_tmux():
    return FakeTmux()


@pytest.fixture
def fake_ipc_server():
    return FakeIpcServer()


@pytest.fixture
def fake_server_factory():
    """Factory that remembers every server it built."""
    servers: list[FakeIpcServer] = []

    def factory(socket_path: str) -> FakeIpcServer:
        server = FakeIpcServer(socket_path)
        servers.append(server)
        return server

    factory.servers = servers
    return factory
