"""ProgressCard component showing installation phases.

Renders the overall percentage, the host's status message and one indicator
per installation phase, derived from the controller's phase mapping.
"""

from typing import List

import flet as ft

from ...core.controller import PhaseView
from ...i18n_manager import t
from ...schemas import ProgressReport


class ProgressCard(ft.Container):
    """Progress bar plus phase indicators for a running installation."""

    ICON_PENDING = ft.Icons.RADIO_BUTTON_UNCHECKED
    ICON_ACTIVE = ft.Icons.REFRESH
    ICON_COMPLETE = ft.Icons.CHECK_CIRCLE

    def __init__(self):
        super().__init__()
        self.progress_bar = ft.ProgressBar(
            value=0,
            height=8,
            bgcolor=ft.Colors.with_opacity(0.1, ft.Colors.GREY_400),
            color=ft.Colors.PRIMARY,
        )
        self.progress_text = ft.Text("0%", size=20, weight=ft.FontWeight.BOLD)
        self.message_text = ft.Text("", size=15, weight=ft.FontWeight.BOLD, expand=True)
        self.phase_row = ft.Row(alignment=ft.MainAxisAlignment.SPACE_EVENLY)

        self.padding = 20
        self.border_radius = 8
        self.bgcolor = ft.Colors.with_opacity(0.03, ft.Colors.GREY_100)
        self.border = ft.border.all(1, ft.Colors.with_opacity(0.1, ft.Colors.GREY_300))
        self.content = ft.Column(
            [
                ft.Row([self.message_text, self.progress_text]),
                self.progress_bar,
                ft.Divider(height=20, color=ft.Colors.GREY_300),
                self.phase_row,
            ],
            spacing=10,
        )

    def show(self, report: ProgressReport, phases: List[PhaseView]):
        """Render a progress report. Does not call update()."""
        self.progress_bar.value = report.progress / 100
        self.progress_text.value = f"{round(report.progress)}%"
        self.message_text.value = report.message
        self.phase_row.controls = [self._phase_indicator(view) for view in phases]

    def _phase_indicator(self, view: PhaseView) -> ft.Control:
        if view.complete:
            icon, color = self.ICON_COMPLETE, ft.Colors.GREEN
        elif view.active:
            icon, color = self.ICON_ACTIVE, ft.Colors.PRIMARY
        else:
            icon, color = self.ICON_PENDING, ft.Colors.GREY_400

        return ft.Column(
            [
                ft.Icon(icon, size=28, color=color),
                ft.Text(
                    t(f"phases.{view.phase.key}"),
                    size=13,
                    color=color,
                    weight=ft.FontWeight.W_500 if view.active else ft.FontWeight.NORMAL,
                ),
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            spacing=6,
        )
