"""Tests for the toggle-mode fallback."""

import os
import stat

import pytest

from ditloop.fallback import ToggleShellOptions, build_shell_env, check_tmux_available, spawn_toggle_shell


def _script(path, body: str):
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


class TestCheckTmuxAvailable:
    """Tests for check_tmux_available()."""

    @pytest.mark.asyncio
    async def test_absent_from_path(self, tmp_path, monkeypatch):
        """Test a missing binary resolves False instead of raising."""
        monkeypatch.setenv("PATH", str(tmp_path))
        assert await check_tmux_available("tmux") is False

    @pytest.mark.asyncio
    async def test_present_and_working(self, tmp_path, monkeypatch):
        """Test a binary answering -V is available."""
        _script(tmp_path / "tmux", "exit 0")
        monkeypatch.setenv("PATH", str(tmp_path))
        assert await check_tmux_available("tmux") is True

    @pytest.mark.asyncio
    async def test_present_but_broken(self, tmp_path, monkeypatch):
        """Test a binary failing -V is not available."""
        _script(tmp_path / "tmux", "exit 1")
        monkeypatch.setenv("PATH", str(tmp_path))
        assert await check_tmux_available("tmux") is False


class TestToggleShell:
    """Tests for spawn_toggle_shell()."""

    def test_build_shell_env(self, monkeypatch):
        """Test the workspace, overrides and profile are exported."""
        monkeypatch.setenv("HOME_MARKER", "kept")
        env = build_shell_env(
            ToggleShellOptions(workspace_path="/work", profile_name="personal", env={"EXTRA": "1"})
        )

        assert env["DITLOOP_WORKSPACE"] == "/work"
        assert env["DITLOOP_PROFILE"] == "personal"
        assert env["EXTRA"] == "1"
        assert env["HOME_MARKER"] == "kept"

    def test_no_profile_not_exported(self, monkeypatch):
        """Test DITLOOP_PROFILE is only set when a profile is given."""
        monkeypatch.delenv("DITLOOP_PROFILE", raising=False)
        env = build_shell_env(ToggleShellOptions(workspace_path="/work"))
        assert "DITLOOP_PROFILE" not in env

    @pytest.mark.asyncio
    async def test_runs_shell_in_workspace(self, tmp_path, monkeypatch):
        """Test the shell runs in the workspace with the environment and exit code."""
        workspace = tmp_path / "ws"
        workspace.mkdir()
        out = tmp_path / "out.txt"
        shell = _script(
            tmp_path / "fake-shell",
            'echo "$DITLOOP_WORKSPACE|$DITLOOP_PROFILE|$EXTRA|$(pwd -P)" > "$OUT"\nexit 3',
        )
        monkeypatch.setenv("SHELL", str(shell))

        code = await spawn_toggle_shell(
            ToggleShellOptions(
                workspace_path=str(workspace),
                profile_name="work",
                env={"OUT": str(out), "EXTRA": "x"},
            )
        )

        assert code == 3
        assert out.read_text().strip() == f"{workspace}|work|x|{os.path.realpath(workspace)}"

    @pytest.mark.asyncio
    async def test_spawn_failure_resolves_1(self, tmp_path, monkeypatch):
        """Test an unstartable shell resolves 1 instead of raising."""
        monkeypatch.setenv("SHELL", str(tmp_path / "no-such-shell"))
        assert await spawn_toggle_shell(ToggleShellOptions(workspace_path=str(tmp_path))) == 1

    @pytest.mark.asyncio
    async def test_missing_workspace_resolves_1(self, tmp_path, monkeypatch):
        """Test a missing workspace directory resolves 1."""
        monkeypatch.setenv("SHELL", "/bin/sh")
        options = ToggleShellOptions(workspace_path=str(tmp_path / "gone"))
        assert await spawn_toggle_shell(options) == 1

    @pytest.mark.asyncio
    async def test_invalid_environment_resolves_1(self, tmp_path, monkeypatch):
        """Test an environment the OS rejects resolves 1 instead of raising."""
        monkeypatch.setenv("SHELL", "/bin/sh")
        options = ToggleShellOptions(workspace_path=str(tmp_path), env={"BROKEN": "a\x00b"})
        assert await spawn_toggle_shell(options) == 1
