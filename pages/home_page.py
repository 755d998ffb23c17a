import time
from datetime import datetime

import flet as ft
import pytz

import settings
from components.app_header import AppHeader
from theme import BG, INK, MUTED, rounded_card, primary_button, ghost_button
from ui_helpers import scroll_view, shell_header, two_col_grid, toast

CATEGORIES = ["persons", "material", "mineral", "explosives"]
SHIFTS = ["Day", "Afternoon", "Night"]
CACHE_KEY = "winderTripCounters"


def trip_counters_entry(counters: dict, shift: str, operator: str, tz_name: str = settings.TIMEZONE) -> dict:
    """Payload for a trip counter save; flat copies keep the web dashboard happy."""
    counts = {c: int(counters.get(c, 0)) for c in CATEGORIES}
    return {
        "entryType": "trip_counters",
        "date": datetime.now(pytz.timezone(tz_name)).strftime("%Y-%m-%d"),
        "shift": shift,
        "user": operator,
        "counters": counts,
        **counts,
        "timestamp": int(time.time() * 1000),
    }


def HomeView(page: ft.Page, manager):
    header_bar, refresh_status = AppHeader(page, manager)
    header = shell_header("Trip counters", "Counts are queued locally and synced when online")

    cached = manager.cache_get(CACHE_KEY) or {}
    counters = {c: int((cached.get("counters") or {}).get(c, 0)) for c in CATEGORIES}

    shift_dd = ft.Dropdown(
        label="Shift",
        value=cached.get("shift") or SHIFTS[0],
        options=[ft.dropdown.Option(s) for s in SHIFTS],
    )
    operator = ft.TextField(label="Operator", value=cached.get("user") or "", border_radius=12)

    count_labels = {c: ft.Text(str(counters[c]), size=22, weight=ft.FontWeight.W_700, color=INK) for c in CATEGORIES}

    def bump(cat: str, delta: int):
        counters[cat] = max(0, counters[cat] + delta)
        count_labels[cat].value = str(counters[cat])
        page.update()

    def counter_card(cat: str):
        return rounded_card(ft.Column([
            ft.Text(cat.capitalize(), color=MUTED, size=12),
            ft.Row([
                ft.IconButton(icon=ft.Icons.REMOVE, on_click=lambda _, c=cat: bump(c, -1)),
                count_labels[cat],
                ft.IconButton(icon=ft.Icons.ADD, on_click=lambda _, c=cat: bump(c, 1)),
            ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
        ], spacing=4), 12)

    def on_save(_):
        name = (operator.value or "").strip()
        if not name:
            toast(page, "Enter the operator name first", error=True)
            return
        entry = trip_counters_entry(counters, shift_dd.value or SHIFTS[0], name)
        item = manager.enqueue(entry)
        manager.cache_set(CACHE_KEY, entry)
        if manager.online:
            toast(page, "Trip counters saved, syncing…")
        else:
            toast(page, f"Offline: trip counters cached locally ({item.id})")
        refresh_status()

    async def sync_now():
        status = manager.get_status()
        if not status.online:
            toast(page, f"Offline mode: {status.pending_count} items cached locally")
            return
        if not manager.remote_store.available:
            toast(page, f"{status.pending_count} items cached locally. Firestore is not configured.")
            return
        if manager.is_syncing:
            toast(page, "Sync already in progress")
            return
        toast(page, f"Syncing to Firestore... {status.pending_count} items pending")
        await manager.sync_pass()
        refresh_status()

    def on_reset(_):
        for c in CATEGORIES:
            counters[c] = 0
            count_labels[c].value = "0"
        page.update()

    actions = ft.Row([
        primary_button("Save counters", on_save),
        ghost_button("Sync now", lambda _: page.run_task(sync_now)),
        ft.TextButton("Reset", on_click=on_reset),
    ], spacing=10, wrap=True)

    body = scroll_view(
        rounded_card(ft.Column([
            header,
            ft.Row([shift_dd, operator], spacing=12),
            two_col_grid([counter_card(c) for c in CATEGORIES]),
            actions,
        ], spacing=16), 16)
    )

    view = ft.View(controls=[header_bar, body], route="/", bgcolor=BG)
    return view, refresh_status
