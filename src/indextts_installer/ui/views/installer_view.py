"""Installer view: system check, installation settings and progress.

The view only renders detector and controller state and forwards user
actions to them; every decision is taken by the controller.
"""

import flet as ft
from pydantic import ValidationError

from ...core import (
    EnvironmentDetector,
    InstallationController,
    InstallState,
    SuitabilityStatus,
)
from ...i18n_manager import t
from ...schemas import MODEL_VARIANTS
from ...utils.formatting import format_bytes
from ..components.progress_card import ProgressCard


class InstallerView(ft.Column):
    """Single-page installer.

    Attributes:
        detector (EnvironmentDetector): Session environment and machine profile
        controller (InstallationController): Installation state machine
    """

    STATUS_COLORS = {
        SuitabilityStatus.UNKNOWN: ft.Colors.GREY_700,
        SuitabilityStatus.GOOD: ft.Colors.GREEN_700,
        SuitabilityStatus.WARNING: ft.Colors.AMBER_800,
        SuitabilityStatus.ERROR: ft.Colors.RED_700,
    }

    def __init__(self, detector: EnvironmentDetector, controller: InstallationController):
        super().__init__()
        self.detector = detector
        self.controller = controller
        self.form_error: str | None = None

        self._init_ui_components()
        self._setup_ui()
        self._remove_listener = self.controller.add_listener(lambda _: self.refresh())

    def _init_ui_components(self):
        # System card
        self.error_banner = ft.Text(color=ft.Colors.RED_700, visible=False)
        self.profile_column = ft.Column(spacing=6)
        self.verdict_text = ft.Text(weight=ft.FontWeight.W_500)
        self.redetect_button = ft.ElevatedButton(
            t("installer.redetect"), icon=ft.Icons.REFRESH, on_click=self._on_redetect_click
        )

        # Settings form
        self.path_field = ft.TextField(
            label=t("installer.install_path"),
            on_change=self._on_path_change,
            expand=True,
        )
        self.model_dropdown = ft.Dropdown(
            label=t("installer.model_type"),
            options=[
                ft.dropdown.Option(key=variant, text=t(f"models.{variant}"))
                for variant in MODEL_VARIANTS
            ],
            on_change=self._on_model_change,
        )
        self.gpu_checkbox = ft.Checkbox(on_change=self._on_gpu_change)
        self.start_button = ft.ElevatedButton(
            t("installer.start"),
            icon=ft.Icons.DOWNLOAD,
            style=ft.ButtonStyle(bgcolor=ft.Colors.PRIMARY, color=ft.Colors.WHITE),
            on_click=self._on_install_click,
        )
        self.settings_panel = ft.Column(
            [
                ft.Text(t("installer.configuration"), size=16, weight=ft.FontWeight.BOLD),
                ft.Row([self.path_field]),
                ft.Row([self.model_dropdown, self.gpu_checkbox], spacing=20),
                ft.Row([self.start_button], alignment=ft.MainAxisAlignment.CENTER),
            ],
            spacing=15,
        )

        # Progress and outcome panels
        self.progress_card = ProgressCard()
        self.notice_text = ft.Text(visible=False)
        self.completed_panel = ft.Column(
            [
                ft.Text(t("installer.completed_title"), size=22, weight=ft.FontWeight.BOLD),
                ft.Text(t("installer.completed_body")),
                ft.Row(
                    [
                        ft.ElevatedButton(
                            t("installer.launch"),
                            icon=ft.Icons.PLAY_ARROW,
                            on_click=self._on_launch_click,
                        ),
                        ft.OutlinedButton(
                            t("installer.open_directory"),
                            icon=ft.Icons.FOLDER_OPEN,
                            on_click=self._on_open_dir_click,
                        ),
                    ],
                    alignment=ft.MainAxisAlignment.CENTER,
                ),
                self.notice_text,
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            visible=False,
        )
        self.failure_text = ft.Text(color=ft.Colors.RED_700)
        self.failed_panel = ft.Column(
            [
                ft.Text(t("installer.failed_title"), size=22, weight=ft.FontWeight.BOLD),
                self.failure_text,
                ft.OutlinedButton(
                    t("installer.restart"), icon=ft.Icons.RESTART_ALT, on_click=self._on_reset_click
                ),
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            visible=False,
        )
        self.progress_panel = ft.Column(
            [self.progress_card, self.completed_panel, self.failed_panel],
            spacing=20,
            visible=False,
        )

    def _setup_ui(self):
        self.spacing = 20
        self.scroll = ft.ScrollMode.AUTO
        self.controls = [
            ft.Text(t("app.title"), size=30),
            ft.Text(t("app.subtitle"), color=ft.Colors.GREY_700),
            ft.Container(
                content=ft.Column(
                    [
                        ft.Row(
                            [
                                ft.Text(
                                    t("installer.system_check"),
                                    size=16,
                                    weight=ft.FontWeight.BOLD,
                                    expand=True,
                                ),
                                self.redetect_button,
                            ]
                        ),
                        self.error_banner,
                        self.profile_column,
                        self.verdict_text,
                    ],
                    spacing=10,
                ),
                padding=20,
                border_radius=12,
                bgcolor=ft.Colors.with_opacity(0.03, ft.Colors.GREY_100),
            ),
            self.settings_panel,
            self.progress_panel,
        ]

    async def initialize(self):
        """Run the one-time environment detection and render the result."""
        self.redetect_button.disabled = True
        self.redetect_button.text = t("installer.detecting")
        self.update()
        await self.detector.detect()
        self.refresh()

    def refresh(self):
        """Re-render everything from detector and controller state."""
        detector, controller = self.detector, self.controller
        request = controller.request

        error = controller.error if controller.state is InstallState.IDLE else None
        start_error = t("controller.start_failed", error=error) if error else None
        banner = self.form_error or detector.error or start_error
        self.error_banner.value = banner
        self.error_banner.visible = bool(banner)

        self.profile_column.controls = self._profile_rows()
        verdict = detector.verdict
        self.verdict_text.value = verdict.summary() if detector.profile else ""
        self.verdict_text.color = self.STATUS_COLORS[verdict.status]

        self.redetect_button.disabled = not detector.privileged or detector.detecting
        self.redetect_button.text = (
            t("installer.detecting") if detector.detecting else t("installer.redetect")
        )

        # Keep an invalid entry as typed so the user can correct it
        if self.form_error is None:
            self.path_field.value = request.install_path
        self.model_dropdown.value = request.model_type
        self.gpu_checkbox.value = request.use_gpu
        cuda = detector.profile is not None and detector.profile.cuda_available
        self.gpu_checkbox.label = f"{t('installer.use_gpu')} " + (
            t("installer.cuda_available") if cuda else t("installer.cuda_unavailable")
        )

        self.start_button.disabled = not controller.can_start() or self.form_error is not None
        if detector.restricted:
            self.start_button.text = t("installer.web_unsupported")
        elif controller.installing:
            self.start_button.text = t("installer.installing")
        else:
            self.start_button.text = t("installer.start")

        in_flight = controller.state is not InstallState.IDLE
        self.settings_panel.visible = not in_flight
        self.progress_panel.visible = in_flight
        self.progress_card.show(controller.progress, controller.phases)
        self.completed_panel.visible = controller.state is InstallState.COMPLETED
        self.failed_panel.visible = controller.state is InstallState.FAILED
        self.failure_text.value = controller.error or ""
        self.notice_text.value = controller.notice or ""
        self.notice_text.visible = bool(controller.notice)

        if self.page:
            self.update()

    def _profile_rows(self):
        profile = self.detector.profile
        if profile is None:
            return []

        not_detected = t("installer.not_detected")
        rows = [
            (t("installer.os"), f"{profile.os} {profile.os_version}"),
            (t("installer.cpu"), f"{profile.cpu_name} ({t('installer.cores', count=profile.cpu_cores)})"),
            (t("installer.memory"), format_bytes(profile.total_memory)),
            (t("installer.disk"), format_bytes(profile.available_disk_space)),
            (t("installer.gpu"), ", ".join(profile.gpu_info)),
            (t("installer.python"), profile.python_version or not_detected),
            (t("installer.git"), profile.git_version or not_detected),
        ]
        return [
            ft.Row(
                [
                    ft.Text(label, width=140, color=ft.Colors.GREY_700),
                    ft.Text(value, weight=ft.FontWeight.W_500),
                ]
            )
            for label, value in rows
        ]

    # Event handlers

    def _update_request(self, **changes):
        self.form_error = None
        try:
            self.controller.update_request(**changes)
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"])
            self.form_error = t("installer.invalid_request", error=f"{field}: {error['msg']}")
            self.refresh()

    def _on_path_change(self, e):
        self._update_request(install_path=e.control.value)

    def _on_model_change(self, e):
        self._update_request(model_type=e.control.value)

    def _on_gpu_change(self, e):
        self._update_request(use_gpu=bool(e.control.value))

    def dispose(self):
        """Stop following controller changes."""
        self._remove_listener()

    async def _on_redetect_click(self, e):
        self.redetect_button.disabled = True
        self.redetect_button.text = t("installer.detecting")
        self.update()
        await self.detector.refresh_profile()
        self.refresh()

    async def _on_install_click(self, e):
        if self.form_error is not None:
            return
        await self.controller.start()
        self.refresh()

    async def _on_launch_click(self, e):
        await self.controller.launch_application()

    async def _on_open_dir_click(self, e):
        await self.controller.open_install_directory()

    def _on_reset_click(self, e):
        self.controller.reset()
