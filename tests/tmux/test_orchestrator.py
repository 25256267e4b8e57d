"""Tests for SessionOrchestrator."""

import asyncio

import pytest

from ditloop.errors import ExternalProcessError
from ditloop.ipc import WORKSPACE_CHANGED
from ditloop.tmux import OrchestrateOptions, SessionOrchestrator, discover_pane_ids


def _options(**overrides) -> OrchestrateOptions:
    values = {
        "session_name": "dl-test",
        "cwd": "/work",
        "cli_command": ["ditloop"],
        "socket_path": "/tmp/dl-test.sock",
    }
    values.update(overrides)
    return OrchestrateOptions(**values)


class TestOrchestrate:
    """Tests for SessionOrchestrator.orchestrate()."""

    @pytest.mark.asyncio
    async def test_builds_pane_tree(self, fake_tmux, fake_server_factory):
        """Test the terminal plus sidebar/git/status panes are created."""
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)

        session = await orchestrator.orchestrate(_options())

        assert session.pane_ids == {"terminal": "%0", "sidebar": "%1", "git": "%2", "status": "%3"}
        assert session.socket_path == "/tmp/dl-test.sock"
        assert fake_tmux.calls_to("create_session") == [("create_session", "dl-test", "/work")]
        for _, options in fake_tmux.calls_to("create_pane"):
            assert options.target == "%0"
            assert options.cwd == "/work"

    @pytest.mark.asyncio
    async def test_launches_panel_processes(self, fake_tmux, fake_server_factory):
        """Test each panel pane runs the CLI with its panel type and the socket."""
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)

        await orchestrator.orchestrate(_options())

        assert fake_tmux.calls_to("send_keys") == [
            ("send_keys", "%1", "ditloop --panel sidebar --ipc /tmp/dl-test.sock"),
            ("send_keys", "%2", "ditloop --panel source-control --ipc /tmp/dl-test.sock"),
            ("send_keys", "%3", "ditloop --panel status --ipc /tmp/dl-test.sock"),
        ]

    @pytest.mark.asyncio
    async def test_tags_roles_binds_and_focuses(self, fake_tmux, fake_server_factory):
        """Test roles are tagged, shortcuts bound and the terminal focused."""
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)

        await orchestrator.orchestrate(_options())

        assert fake_tmux.roles == {"%0": "terminal", "%1": "sidebar", "%2": "git", "%3": "status"}
        binds = fake_tmux.calls_to("bind_key")
        assert len(binds) == 5
        assert binds[0] == ("bind_key", "C-1", "ditloop --apply-layout default")
        assert binds[4] == ("bind_key", "C-5", "ditloop --apply-layout zen")
        assert fake_tmux.calls[-1] == ("select_pane", "%0")

    @pytest.mark.asyncio
    async def test_default_layout_not_resized(self, fake_tmux, fake_server_factory):
        """Test the default preset issues no resizes."""
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)
        await orchestrator.orchestrate(_options(bind_shortcuts=False))

        assert fake_tmux.calls_to("resize_pane") == []
        assert fake_tmux.calls_to("bind_key") == []

    @pytest.mark.asyncio
    async def test_requested_layout_applied(self, fake_tmux, fake_server_factory):
        """Test a non-default preset is applied once the panes exist."""
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)
        await orchestrator.orchestrate(_options(layout="code-focus"))

        resized = {c[1]: c[2].width for c in fake_tmux.calls_to("resize_pane")}
        assert resized == {"%1": "10%", "%0": "80%", "%2": "10%"}

    @pytest.mark.asyncio
    async def test_stale_session_killed(self, fake_tmux, fake_server_factory):
        """Test an existing session with the same name is replaced."""
        fake_tmux.sessions.add("dl-test")
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)

        await orchestrator.orchestrate(_options())

        methods = [c[0] for c in fake_tmux.calls]
        assert methods.index("kill_session") < methods.index("create_session")

    @pytest.mark.asyncio
    async def test_starts_server_and_broadcasts_workspaces(self, fake_tmux, fake_server_factory):
        """Test the IPC server is started and workspaces are announced."""
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)
        workspaces = [{"path": "/work", "name": "work"}]

        session = await orchestrator.orchestrate(_options(workspaces=workspaces))

        server = fake_server_factory.servers[0]
        assert session.ipc_server is server
        assert server.started is True
        assert len(server.broadcasts) == 1
        assert server.broadcasts[0].type == WORKSPACE_CHANGED
        assert server.broadcasts[0].payload == {"workspaces": workspaces}

    @pytest.mark.asyncio
    async def test_unknown_layout_rejected_early(self, fake_tmux, fake_server_factory):
        """Test a bad preset name fails before anything is created."""
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)

        with pytest.raises(ValueError):
            await orchestrator.orchestrate(_options(layout="nope"))

        assert fake_tmux.calls == []
        assert fake_server_factory.servers == []


class TestOrchestrateRollback:
    """Tests for partial-failure rollback."""

    @pytest.mark.asyncio
    async def test_pane_failure_kills_created_panes(self, fake_tmux, fake_server_factory):
        """Test a failed split kills every pane created so far, newest first."""
        fake_tmux.fail["create_pane"] = 1
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)

        with pytest.raises(ExternalProcessError):
            await orchestrator.orchestrate(_options(workspaces=[{"path": "/work"}]))

        assert fake_tmux.calls_to("kill_pane") == [("kill_pane", "%1"), ("kill_pane", "%0")]
        server = fake_server_factory.servers[0]
        assert server.stopped is True
        assert server.broadcasts == []

    @pytest.mark.asyncio
    async def test_send_keys_failure_rolls_back(self, fake_tmux, fake_server_factory):
        """Test a failure after a pane exists still removes it."""
        fake_tmux.fail["send_keys"] = 0
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)

        with pytest.raises(ExternalProcessError):
            await orchestrator.orchestrate(_options())

        assert [c[1] for c in fake_tmux.calls_to("kill_pane")] == ["%1", "%0"]

    @pytest.mark.asyncio
    async def test_rollback_kill_failure_keeps_original_error(self, fake_tmux, fake_server_factory):
        """Test kill failures during rollback do not mask the original error."""
        fake_tmux.fail["create_pane"] = 0
        fake_tmux.fail["kill_pane"] = 0
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)

        with pytest.raises(ExternalProcessError) as exc_info:
            await orchestrator.orchestrate(_options())

        assert exc_info.value.command == ["tmux", "create_pane"]
        assert fake_server_factory.servers[0].stopped is True

    @pytest.mark.asyncio
    async def test_cancellation_rolls_back(self, fake_tmux, fake_server_factory):
        """Test cancellation mid-setup also removes created panes."""

        async def cancelled(options):
            raise asyncio.CancelledError

        fake_tmux.create_pane = cancelled
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)

        with pytest.raises(asyncio.CancelledError):
            await orchestrator.orchestrate(_options())

        assert fake_tmux.calls_to("kill_pane") == [("kill_pane", "%0")]
        assert fake_server_factory.servers[0].stopped is True


class TestTeardownAndDiscovery:
    """Tests for OrchestratedSession.teardown() and discover_pane_ids()."""

    @pytest.mark.asyncio
    async def test_teardown_idempotent(self, fake_tmux, fake_server_factory):
        """Test teardown kills the session and stops the server once."""
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)
        session = await orchestrator.orchestrate(_options())

        await session.teardown()
        await session.teardown()

        assert fake_tmux.calls_to("kill_session") == [("kill_session", "dl-test")]
        assert fake_server_factory.servers[0].stopped is True
        assert session.closed is True

    @pytest.mark.asyncio
    async def test_teardown_tolerates_missing_session(self, fake_tmux, fake_server_factory):
        """Test teardown succeeds when the session is already gone."""
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)
        session = await orchestrator.orchestrate(_options())
        fake_tmux.fail["kill_session"] = 0

        await session.teardown()

        assert fake_server_factory.servers[0].stopped is True

    @pytest.mark.asyncio
    async def test_discover_pane_ids(self, fake_tmux, fake_server_factory):
        """Test the role map is rebuilt from pane role tags."""
        orchestrator = SessionOrchestrator(fake_tmux, server_factory=fake_server_factory)
        session = await orchestrator.orchestrate(_options())

        assert await discover_pane_ids(fake_tmux, "dl-test") == session.pane_ids
