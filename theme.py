# theme.py
import flet as ft

PRIMARY = "#E8871E"      # safety orange
PRIMARY_DIM = "#F3B97A"
BG = "#F2F4F7"
INK = "#1C2430"
MUTED = "#66707F"
OK = "#2ECC71"
ERROR = "#E5484D"

def rounded_card(content: ft.Control, pad: int = 16):
    return ft.Container(
        content=content,
        padding=pad,
        bgcolor="#FFFFFF",
        border_radius=16,
    )

def primary_button(text: str, on_click):
    return ft.ElevatedButton(
        text,
        on_click=on_click,
        style=ft.ButtonStyle(
            shape=ft.RoundedRectangleBorder(radius=12),
            padding=ft.Padding(16, 10, 16, 10),
            color="#FFFFFF",
            bgcolor=PRIMARY,
        ),
    )

def ghost_button(text: str, on_click):
    return ft.OutlinedButton(
        text,
        on_click=on_click,
        style=ft.ButtonStyle(
            shape=ft.RoundedRectangleBorder(radius=12),
            padding=ft.Padding(16, 10, 16, 10),
            color=PRIMARY,
            side=ft.BorderSide(1, PRIMARY),
        ),
    )
