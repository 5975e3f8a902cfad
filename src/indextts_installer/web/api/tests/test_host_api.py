"""Tests for the host service endpoints."""

import asyncio
import time
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from indextts_installer import __version__
from indextts_installer.config import InstallerSettings
from indextts_installer.i18n_manager import set_locale
from indextts_installer.schemas import MachineProfile, ProgressReport
from indextts_installer.web.core.state import HostState
from indextts_installer.web.main import create_app


class CompletingRunner:
    """Runner stand-in that finishes immediately."""

    def __init__(self, request, on_progress, **kwargs):
        self.request = request
        self.on_progress = on_progress

    async def run(self):
        await self.on_progress(
            ProgressReport(step="completed", progress=100, message="done", is_complete=True)
        )
        return True


class BlockingRunner(CompletingRunner):
    """Runner stand-in that never finishes on its own."""

    async def run(self):
        await asyncio.sleep(3600)


@pytest.fixture(autouse=True)
def english_locale():
    set_locale("en")


@pytest.fixture
def settings():
    return InstallerSettings(python_executable="python3", step_delay=0)


@pytest.fixture
def client(settings):
    app = create_app(settings, state=HostState(settings))
    with TestClient(app) as client:
        yield client


def wait_until_finished(client, attempts=100):
    for _ in range(attempts):
        report = client.get("/api/v1/install/progress").json()
        if report["is_complete"] or report["has_error"]:
            return report
        time.sleep(0.01)
    raise AssertionError("installation did not finish")


class TestHealthEndpoint:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


class TestSystemEndpoints:
    """Tests for /api/v1/system."""

    def test_default_install_path(self, client):
        with patch(
            "indextts_installer.web.api.system.default_install_path",
            return_value="/home/ada/Documents/IndexTTS",
        ):
            response = client.get("/api/v1/system/default-install-path")

        assert response.status_code == 200
        assert response.json() == {"install_path": "/home/ada/Documents/IndexTTS"}

    def test_profile(self, client):
        profile = MachineProfile(
            os="Linux",
            os_version="6.8.0",
            cpu_name="Intel Core i7-1260P",
            cpu_cores=16,
            total_memory=16 * 1024**3,
            available_memory=8 * 1024**3,
            total_disk_space=512 * 1024**3,
            available_disk_space=200 * 1024**3,
            gpu_info=["Unknown GPU"],
            python_version="Python 3.12.3",
            git_version=None,
        )
        with patch(
            "indextts_installer.web.api.system.collect_machine_profile",
            return_value=profile,
        ):
            response = client.get("/api/v1/system/profile")

        assert response.status_code == 200
        data = response.json()
        assert data["cpu_cores"] == 16
        assert data["git_version"] is None
        assert data["cuda_available"] is False

    def test_profile_failure(self, client):
        with patch(
            "indextts_installer.web.api.system.collect_machine_profile",
            side_effect=RuntimeError("sysctl unavailable"),
        ):
            response = client.get("/api/v1/system/profile")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to collect system info: sysctl unavailable"


class TestInstallEndpoints:
    """Tests for /api/v1/install."""

    def test_initial_progress_is_idle(self, client):
        response = client.get("/api/v1/install/progress")

        assert response.status_code == 200
        data = response.json()
        assert data["step"] == "idle"
        assert data["progress"] == 0
        assert data["is_complete"] is False
        assert data["has_error"] is False

    def test_start_creates_directory_and_runs(self, client, tmp_path):
        """Test that starting creates the directory and the runner's reports show up."""
        install_path = tmp_path / "IndexTTS"

        with patch("indextts_installer.web.core.state.InstallationRunner", CompletingRunner):
            response = client.post(
                "/api/v1/install/start",
                json={"install_path": str(install_path), "model_type": "standard", "use_gpu": False},
            )
            assert response.status_code == 200
            assert response.json() == {"message": "Installation started"}

            report = wait_until_finished(client)

        assert install_path.is_dir()
        assert report["step"] == "completed"
        assert report["progress"] == 100

    def test_second_start_conflicts(self, client, tmp_path):
        body = {"install_path": str(tmp_path / "IndexTTS")}

        with patch("indextts_installer.web.core.state.InstallationRunner", BlockingRunner):
            first = client.post("/api/v1/install/start", json=body)
            second = client.post("/api/v1/install/start", json=body)

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["detail"] == "Installation already in progress"

    def test_start_reports_preparing_immediately(self, client, tmp_path):
        with patch("indextts_installer.web.core.state.InstallationRunner", BlockingRunner):
            client.post("/api/v1/install/start", json={"install_path": str(tmp_path / "x")})
            report = client.get("/api/v1/install/progress").json()

        assert report["step"] == "preparing"
        assert report["progress"] == 0

    def test_start_with_uncreatable_directory(self, client, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        response = client.post(
            "/api/v1/install/start", json={"install_path": str(blocker / "IndexTTS")}
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Failed to create install directory:")

    def test_start_rejects_unknown_model(self, client, tmp_path):
        response = client.post(
            "/api/v1/install/start",
            json={"install_path": str(tmp_path), "model_type": "huge"},
        )

        assert response.status_code == 422

    def test_launch_missing_directory(self, client, tmp_path):
        response = client.post(
            "/api/v1/install/launch", json={"install_path": str(tmp_path / "missing")}
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Installation path does not exist"

    def test_launch_missing_entry_script(self, client, tmp_path):
        response = client.post("/api/v1/install/launch", json={"install_path": str(tmp_path)})

        assert response.status_code == 404
        assert response.json()["detail"] == "IndexTTS main.py not found in installation directory"

    def test_launch_spawns_entry_script(self, client, tmp_path):
        (tmp_path / "main.py").write_text("print('hello')\n")

        with patch("indextts_installer.web.api.install._spawn") as mock_spawn:
            response = client.post("/api/v1/install/launch", json={"install_path": str(tmp_path)})

        assert response.status_code == 200
        assert response.json() == {"message": "IndexTTS launched successfully"}
        mock_spawn.assert_called_once_with(["python3", "main.py"], cwd=tmp_path)

    def test_launch_spawn_failure(self, client, tmp_path):
        (tmp_path / "main.py").write_text("print('hello')\n")

        with patch(
            "indextts_installer.web.api.install._spawn",
            side_effect=FileNotFoundError("python3 not found"),
        ):
            response = client.post("/api/v1/install/launch", json={"install_path": str(tmp_path)})

        assert response.status_code == 500
        assert "python3 not found" in response.json()["detail"]

    def test_open_directory(self, client, tmp_path):
        with patch("indextts_installer.web.api.install._open_in_file_manager") as mock_open:
            response = client.post(
                "/api/v1/install/open-directory", json={"install_path": str(tmp_path)}
            )

        assert response.status_code == 200
        assert response.json() == {"message": str(tmp_path)}
        mock_open.assert_called_once_with(tmp_path)

    def test_open_missing_directory(self, client, tmp_path):
        response = client.post(
            "/api/v1/install/open-directory", json={"install_path": str(tmp_path / "missing")}
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Installation directory does not exist"
