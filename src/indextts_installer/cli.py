"""Command-line front end for the IndexTTS installer."""

from __future__ import annotations

import argparse
import asyncio
import sys

from pydantic import ValidationError

from indextts_installer import __version__
from indextts_installer.config import InstallerSettings, load_settings
from indextts_installer.core import (
    EnvironmentDetector,
    InstallationController,
    InstallState,
    SuitabilityStatus,
)
from indextts_installer.exceptions import ConfigError
from indextts_installer.host import HttpHostClient
from indextts_installer.i18n_manager import set_locale, t
from indextts_installer.schemas import MODEL_VARIANTS, MachineProfile
from indextts_installer.utils.formatting import format_bytes
from indextts_installer.utils.logger import get_logger, initialize

logger = get_logger("indextts.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_RESTRICTED = 2

STATUS_ICONS = {
    SuitabilityStatus.UNKNOWN: "?",
    SuitabilityStatus.GOOD: "✅",
    SuitabilityStatus.WARNING: "⚠️",
    SuitabilityStatus.ERROR: "❌",
}


def render_profile(profile: MachineProfile) -> str:
    not_detected = t("installer.not_detected")
    cuda = (
        t("installer.cuda_available")
        if profile.cuda_available
        else t("installer.cuda_unavailable")
    )
    rows = [
        (t("installer.os"), f"{profile.os} {profile.os_version}"),
        (
            t("installer.cpu"),
            f"{profile.cpu_name} ({t('installer.cores', count=profile.cpu_cores)})",
        ),
        (
            t("installer.memory"),
            f"{format_bytes(profile.available_memory)} / {format_bytes(profile.total_memory)}",
        ),
        (
            t("installer.disk"),
            f"{format_bytes(profile.available_disk_space)} / {format_bytes(profile.total_disk_space)}",
        ),
        (t("installer.gpu"), f"{', '.join(profile.gpu_info)} {cuda}"),
        (t("installer.python"), profile.python_version or not_detected),
        (t("installer.git"), profile.git_version or not_detected),
    ]
    width = max(len(label) for label, _ in rows)
    return "\n".join(f"  {label.ljust(width)}  {value}" for label, value in rows)


def render_progress(controller: InstallationController) -> str:
    report = controller.progress
    marks = []
    for view in controller.phases:
        if view.complete:
            mark = "✔"
        elif view.active:
            mark = "▶"
        else:
            mark = "·"
        marks.append(f"{mark} {view.phase.label}")
    return f"[{report.progress:5.1f}%] {report.message}\n  " + "  ".join(marks)


class ProgressPrinter:
    """Controller listener printing each new progress report once."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self._last = None

    def __call__(self, controller: InstallationController) -> None:
        report = controller.progress
        # Nothing reported yet
        if report.step == "idle" or report == self._last:
            return
        self._last = report
        print(render_progress(controller), file=self.stream, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="indextts-installer",
        description="Check this machine and install IndexTTS through the host service",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--config", help="Path to installer settings YAML")
    parser.add_argument("--host-url", help="URL of the IndexTTS host service")
    parser.add_argument("--locale", choices=["en", "zh"], help="Interface language")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument(
        "--install", action="store_true", help="Start the installation after checks"
    )
    parser.add_argument("--install-path", help="Installation directory")
    parser.add_argument(
        "--model-type", choices=MODEL_VARIANTS, default="standard", help="Model variant"
    )
    parser.add_argument("--gpu", action="store_true", help="Request GPU acceleration")
    parser.add_argument(
        "--launch", action="store_true", help="Launch IndexTTS after installing"
    )
    parser.add_argument(
        "--open-dir", action="store_true", help="Open the install directory afterwards"
    )
    return parser


async def run(args: argparse.Namespace, settings: InstallerSettings) -> int:
    host = HttpHostClient(settings.host_url, timeout=settings.request_timeout)
    detector = EnvironmentDetector(host)
    controller = InstallationController(
        host, detector, poll_interval=settings.poll_interval
    )

    try:
        print(t("app.title"))
        await detector.detect()
        if detector.restricted:
            print(detector.error, file=sys.stderr)
            return EXIT_RESTRICTED

        print(f"\n{t('installer.system_check')}")
        if detector.profile is not None:
            print(render_profile(detector.profile))
        if detector.error:
            print(detector.error, file=sys.stderr)

        verdict = detector.verdict
        print(f"\n{STATUS_ICONS[verdict.status]} {verdict.summary()}")

        if not args.install:
            return EXIT_OK

        changes = {"model_type": args.model_type, "use_gpu": args.gpu}
        if args.install_path:
            changes["install_path"] = args.install_path
        try:
            controller.update_request(**changes)
        except ValidationError as e:
            print(e, file=sys.stderr)
            return EXIT_FAILED

        controller.add_listener(ProgressPrinter())

        request = controller.request
        print(f"\n{t('installer.install_path')}: {request.install_path}")
        print(f"{t('installer.model_type')}: {t('models.' + request.model_type)}")

        if not await controller.start():
            if controller.error:
                print(t("controller.start_failed", error=controller.error), file=sys.stderr)
            else:
                print(t("installer.refused"), file=sys.stderr)
            return EXIT_FAILED

        state = await controller.wait()
        if state is not InstallState.COMPLETED:
            print(f"\n{t('installer.failed_title')}", file=sys.stderr)
            print(t("controller.install_failed", error=controller.error), file=sys.stderr)
            return EXIT_FAILED

        print(f"\n🎉 {t('installer.completed_title')}")
        print(t("installer.completed_body"))

        if args.launch:
            await controller.launch_application()
            print(controller.notice)
        if args.open_dir and not await controller.open_install_directory():
            print(controller.notice, file=sys.stderr)

        return EXIT_OK
    finally:
        await controller.cleanup()
        await host.aclose()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        parser.error(str(e))

    overrides = {}
    if args.host_url:
        overrides["host_url"] = args.host_url
    if args.locale:
        overrides["locale"] = args.locale
    if args.log_level:
        overrides["log_level"] = args.log_level
    settings = settings.model_copy(update=overrides)

    initialize(level=settings.log_level, log_dir=settings.log_dir)
    set_locale(settings.locale)
    logger.debug(f"Using host service at {settings.host_url}")

    try:
        return asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
