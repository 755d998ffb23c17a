# components/app_header.py
from datetime import datetime

import flet as ft
import pytz

import settings
from models.pending_item import SyncStatus
from theme import INK, MUTED


def describe_status(status: SyncStatus, tz_name: str = settings.TIMEZONE) -> tuple[str, str, str]:
    """(indicator, label, detail) for the connection bar."""
    indicator = "🟢" if status.online else "🔴"
    label = "Online" if status.online else "Offline"
    parts = []
    if status.pending_count > 0:
        parts.append(f"({status.pending_count} pending)")
    if status.last_sync_time:
        when = datetime.fromtimestamp(status.last_sync_time / 1000, pytz.timezone(tz_name))
        parts.append(f"last sync {when.strftime('%H:%M')}")
    return indicator, label, " ".join(parts)


def AppHeader(page: ft.Page, manager):
    """
    Connection bar shown on top of every view. Returns the control and a
    refresh() callable; the caller decides when to refresh.
    """
    indicator = ft.Text("", size=14)
    label = ft.Text("", size=14, weight=ft.FontWeight.W_600, color=INK)
    detail = ft.Text("", size=12, color=MUTED)

    def refresh():
        ind, lbl, det = describe_status(manager.get_status())
        indicator.value = ind
        label.value = lbl
        detail.value = det
        page.update()

    bar = ft.Container(
        padding=ft.padding.symmetric(horizontal=16, vertical=10),
        bgcolor="#FFFFFF",
        content=ft.Row(
            [
                ft.Text("Winder Logbook", size=16, weight=ft.FontWeight.W_700, color=INK),
                ft.Container(expand=True),
                indicator,
                label,
                detail,
            ],
            spacing=8,
            vertical_alignment=ft.CrossAxisAlignment.CENTER,
        ),
    )
    return bar, refresh
