import flet as ft

from ..config import InstallerSettings, load_settings
from ..core import EnvironmentDetector, InstallationController
from ..exceptions import ConfigError
from ..host import HttpHostClient
from ..i18n_manager import get_i18n_manager, t
from ..utils.logger import get_logger, initialize
from .views.installer_view import InstallerView

logger = get_logger("indextts.ui")


def load_gui_settings(config_path=None) -> InstallerSettings:
    """Load settings, falling back to the defaults when the file is unusable."""
    try:
        return load_settings(config_path)
    except ConfigError as e:
        logger.error(f"{e}; using default settings")
        return InstallerSettings()


async def main(page: ft.Page):
    settings = load_gui_settings()
    initialize(level=settings.log_level, log_dir=settings.log_dir)

    i18n_manager = get_i18n_manager()
    i18n_manager.set_locale(settings.locale)

    # ---- Page setup ----
    page.title = t("app.title")
    page.theme_mode = ft.ThemeMode.SYSTEM

    try:
        page.window.min_width = 800
        page.window.min_height = 600
    except AttributeError:
        pass

    # ---- Session objects ----
    host = HttpHostClient(settings.host_url, timeout=settings.request_timeout)
    detector = EnvironmentDetector(host)
    controller = InstallationController(
        host, detector, poll_interval=settings.poll_interval
    )

    content_area = ft.Container(expand=True, padding=20)

    def build_view():
        view = InstallerView(detector, controller)
        content_area.content = view
        return view

    # ---- Language switch ----
    def change_language(locale):
        i18n_manager.set_locale(locale)
        page.title = t("app.title")

        # Labels are resolved at construction, so rebuild the view
        content_area.content.dispose()
        build_view().refresh()
        page.update()

    lang_switch = ft.PopupMenuButton(
        icon=ft.Icons.LANGUAGE,
        tooltip="Change Language",
        items=[
            ft.PopupMenuItem(text="English", on_click=lambda _: change_language("en")),
            ft.PopupMenuItem(text="中文", on_click=lambda _: change_language("zh")),
        ],
    )

    async def handle_disconnect(e):
        logger.info("Window closed, releasing host connection")
        await controller.cleanup()
        await host.aclose()

    page.on_disconnect = handle_disconnect

    view = build_view()
    page.add(
        ft.Column(
            [
                ft.Container(
                    content=lang_switch,
                    alignment=ft.alignment.top_right,
                    padding=ft.padding.only(right=10, top=10),
                ),
                content_area,
            ],
            expand=True,
        )
    )

    await view.initialize()


def start_app():
    """Entry point for the indextts-installer-gui command."""
    ft.app(target=main)


if __name__ == "__main__":
    start_app()
