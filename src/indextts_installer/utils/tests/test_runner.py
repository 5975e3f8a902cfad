"""Tests for the host-side installation runner."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from indextts_installer.i18n_manager import set_locale
from indextts_installer.schemas import InstallRequest
from indextts_installer.utils.installation import InstallationRunner

SUBPROCESS = "indextts_installer.utils.installation.runner.asyncio.create_subprocess_exec"


def fake_process(returncode=0, stderr=b""):
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(b"", stderr))
    return process


@pytest.fixture(autouse=True)
def english_locale():
    set_locale("en")


@pytest.fixture
def reports():
    return []


@pytest.fixture
def make_runner(tmp_path, reports):
    async def record(report):
        reports.append(report)

    def factory(**kwargs):
        request = InstallRequest(install_path=str(tmp_path / "IndexTTS"))
        return InstallationRunner(
            request,
            on_progress=record,
            repository_url="https://example.invalid/IndexTTS.git",
            python_executable="python3",
            step_delay=0,
            **kwargs,
        )

    return factory


class TestInstallationRunner:
    """Tests for InstallationRunner.run()."""

    @pytest.mark.asyncio
    async def test_successful_run_reports_every_step(self, make_runner, reports, tmp_path):
        with patch(SUBPROCESS, AsyncMock(return_value=fake_process())):
            assert await make_runner().run() is True

        assert [(r.step, r.progress) for r in reports] == [
            ("preparing", 5),
            ("downloading", 20),
            ("downloading", 40),
            ("dependencies", 60),
            ("dependencies", 80),
            ("models", 90),
            ("completed", 100),
        ]
        assert reports[-1].is_complete is True
        assert not any(r.has_error for r in reports)
        assert (tmp_path / "IndexTTS" / "checkpoints").is_dir()

    @pytest.mark.asyncio
    async def test_commands_executed(self, make_runner, tmp_path):
        """Test that git clone and pip install run with the configured tools."""
        install_path = tmp_path / "IndexTTS"
        spawn = AsyncMock(return_value=fake_process())

        with patch(SUBPROCESS, spawn):
            await make_runner().run()

        clone, pip = spawn.call_args_list
        assert clone.args == (
            "git", "clone", "https://example.invalid/IndexTTS.git", str(install_path)
        )
        assert pip.args == (
            "python3", "-m", "pip", "install", "-r", "requirements.txt"
        )
        assert pip.kwargs["cwd"] == str(install_path)

    @pytest.mark.asyncio
    async def test_clone_failure_reports_error(self, make_runner, reports):
        failing = fake_process(returncode=128, stderr=b"fatal: repository not found\n")

        with patch(SUBPROCESS, AsyncMock(return_value=failing)) as spawn:
            assert await make_runner().run() is False

        assert spawn.call_count == 1
        last = reports[-1]
        assert last.step == "error"
        assert last.progress == 0
        assert last.has_error is True
        assert last.is_complete is False
        assert last.message == "Git clone failed: fatal: repository not found"

    @pytest.mark.asyncio
    async def test_pip_failure_reports_error(self, make_runner, reports):
        spawn = AsyncMock(
            side_effect=[fake_process(), fake_process(returncode=1, stderr=b"No matching distribution")]
        )

        with patch(SUBPROCESS, spawn):
            assert await make_runner().run() is False

        assert reports[-2].step == "dependencies"
        assert reports[-1].message == "Pip install failed: No matching distribution"

    @pytest.mark.asyncio
    async def test_missing_git_reports_error(self, make_runner, reports):
        with patch(SUBPROCESS, AsyncMock(side_effect=FileNotFoundError("git"))):
            assert await make_runner().run() is False

        assert reports[-1].has_error is True
        assert reports[-1].message.startswith("Failed to run git clone:")

    @pytest.mark.asyncio
    async def test_unexpected_error_reports_error(self, make_runner, reports):
        with patch(SUBPROCESS, AsyncMock(side_effect=RuntimeError("event loop closed"))):
            assert await make_runner().run() is False

        assert reports[-1].step == "error"
        assert reports[-1].message == "event loop closed"
