import flet as ft
from theme import BG, INK, MUTED, ERROR, OK


def scroll_view(*controls):
    return ft.Container(
        expand=True,
        bgcolor=BG,
        padding=20,
        content=ft.Column(
            list(controls),
            expand=True,
            scroll=ft.ScrollMode.ADAPTIVE,
            spacing=14,
            horizontal_alignment=ft.CrossAxisAlignment.STRETCH,
        ),
    )

def shell_header(title: str, subtitle: str = ""):
    return ft.Column([
        ft.Text(title, size=20, weight=ft.FontWeight.W_700, color=INK),
        ft.Text(subtitle, size=12, color=MUTED) if subtitle else ft.Container(),
    ], spacing=2)


def two_col_grid(items: list[ft.Control]):
    rows = []
    for i in range(0, len(items), 2):
        left = items[i]
        right = items[i+1] if i+1 < len(items) else ft.Container(expand=1)
        rows.append(
            ft.Row([ft.Container(left, expand=1), ft.Container(right, expand=1)], spacing=12)
        )
    return ft.Column(rows, spacing=12)


def toast(page: ft.Page, msg: str, error: bool = False):
    page.snack_bar = ft.SnackBar(ft.Text(msg), bgcolor=ERROR if error else OK)
    page.snack_bar.open = True
    page.update()
