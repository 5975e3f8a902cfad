"""Shared fixtures for core tests."""

from collections import deque

import pytest

from indextts_installer.core.compatibility import GIB
from indextts_installer.exceptions import HostCommandError
from indextts_installer.host.client import HostClient
from indextts_installer.i18n_manager import set_locale
from indextts_installer.schemas import MachineProfile, ProgressReport


class FakeHost(HostClient):
    """In-memory HostClient recording every command it receives.

    ``progress`` is a queue of ProgressReports or exceptions handed out one
    per progress call; once it runs dry the last report is repeated.
    ``probe_gate`` and ``start_gate``, when set to an asyncio.Event, hold the
    matching command until the event is set.
    """

    def __init__(self, profile=None, reachable=True):
        self.reachable = reachable
        self.profile = profile
        self.default_path = "/home/tester/Documents/IndexTTS"
        self.progress = deque()
        self.start_error = None
        self.profile_error = None
        self.path_error = None
        self.launch_error = None
        self.open_error = None
        self.probe_gate = None
        self.start_gate = None
        self.calls = []
        self._last_report = ProgressReport()

    def count(self, name):
        return sum(1 for call, _ in self.calls if call == name)

    async def probe(self):
        self.calls.append(("probe", None))
        if self.probe_gate is not None:
            await self.probe_gate.wait()
        if not self.reachable:
            raise HostCommandError("host unreachable")

    async def get_default_install_path(self):
        self.calls.append(("get_default_install_path", None))
        if self.path_error:
            raise self.path_error
        return self.default_path

    async def get_machine_profile(self):
        self.calls.append(("get_machine_profile", None))
        if self.profile_error:
            raise self.profile_error
        return self.profile

    async def start_installation(self, request):
        self.calls.append(("start_installation", request))
        if self.start_gate is not None:
            await self.start_gate.wait()
        if self.start_error:
            raise self.start_error
        return "Installation started"

    async def get_installation_progress(self):
        self.calls.append(("get_installation_progress", None))
        if self.progress:
            item = self.progress.popleft()
            if isinstance(item, Exception):
                raise item
            self._last_report = item
        return self._last_report

    async def launch_application(self, install_path):
        self.calls.append(("launch_application", install_path))
        if self.launch_error:
            raise self.launch_error
        return "IndexTTS launched successfully"

    async def open_install_directory(self, install_path):
        self.calls.append(("open_install_directory", install_path))
        if self.open_error:
            raise self.open_error


def make_profile(**overrides):
    """A profile passing every compatibility check unless overridden."""
    values = {
        "os": "Darwin",
        "os_version": "14.5",
        "cpu_name": "Apple M2",
        "cpu_cores": 8,
        "total_memory": 16 * GIB,
        "available_memory": 6 * GIB,
        "total_disk_space": 500 * GIB,
        "available_disk_space": 120 * GIB,
        "gpu_info": ["Apple M2"],
        "python_version": "Python 3.11.9",
        "git_version": "git version 2.39.3",
        "cuda_available": False,
    }
    values.update(overrides)
    return MachineProfile(**values)


@pytest.fixture(autouse=True)
def english_locale():
    set_locale("en")
    yield
    set_locale("en")


@pytest.fixture
def good_profile():
    return make_profile()


@pytest.fixture
def fake_host(good_profile):
    return FakeHost(profile=good_profile)


@pytest.fixture
def profile_factory():
    return make_profile


@pytest.fixture
def host_factory():
    return FakeHost
