# main.py
import asyncio
import logging

import flet as ft

import settings
from pages.home_page import HomeView
from services.connectivity import ConnectivityMonitor
from services.remote_store import build_remote_store
from services.sync_offline import Connectivity, OfflineSyncManager
from ui_helpers import toast

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(settings.LOG_FILE),
        logging.StreamHandler(),
    ]
)
logger = logging.getLogger(__name__)

STATUS_REFRESH_SECONDS = 30


def main(page: ft.Page):
    page.title = "Winder Logbook"
    page.theme_mode = ft.ThemeMode.LIGHT
    page.window_min_width = 360
    page.window_min_height = 640
    page.horizontal_alignment = ft.CrossAxisAlignment.CENTER
    page.vertical_alignment = ft.MainAxisAlignment.START

    # Chosen once; views never check for Firebase themselves
    remote = build_remote_store()

    manager = OfflineSyncManager(
        page.client_storage,
        remote,
        online=False,
        run_task=page.run_task,
        on_notify=lambda msg: toast(page, msg),
        on_warning=lambda msg: toast(page, msg, error=True),
    )
    monitor = ConnectivityMonitor(manager)

    view, refresh_status = HomeView(page, manager)
    page.views.clear()
    page.views.append(view)
    page.update()

    def on_connect(_):
        manager.notify_connectivity_changed(Connectivity.ONLINE)
        refresh_status()

    def on_disconnect(_):
        manager.notify_connectivity_changed(Connectivity.OFFLINE)

    page.on_connect = on_connect
    page.on_disconnect = on_disconnect

    async def status_loop():
        while True:
            refresh_status()
            await asyncio.sleep(STATUS_REFRESH_SECONDS)

    page.run_task(monitor.run)
    page.run_task(status_loop)


if __name__ == "__main__":
    ft.app(target=main, assets_dir="assets")
