"""
Email templates for the SA-RP User Control Panel.

Copy is in Romanian, the community's language. Styles are inline because
most mail clients strip <style> blocks.

Each template function returns (subject, html_body, text_body). Values
interpolated into HTML are escaped; the plain-text body carries them as-is.
"""

from __future__ import annotations

from html import escape

from ucp.auth.tokens import TOKEN_WINDOW_SECONDS

APP_NAME = "SA-RP"
LINK_MINUTES = TOKEN_WINDOW_SECONDS // 60

PAGE = "#101318"
CARD = "#181D25"
RED = "#C8102E"
GREEN = "#2EA043"
INK = "#EEF1F5"
MUTED = "#97A0AB"
RULE = "#262C35"

SIGNATURE = f"-- Echipa {APP_NAME}"


def _heading(text: str, color: str = INK) -> str:
    return f'<h1 style="margin:0 0 16px;font-size:24px;color:{color};">{text}</h1>'


def _para(text: str, size: int = 16) -> str:
    return f'<p style="margin:0 0 16px;font-size:{size}px;line-height:1.6;color:{MUTED};">{text}</p>'


def _strong(text: str) -> str:
    return f'<strong style="color:{INK};">{escape(text)}</strong>'


def _action(url: str, label: str) -> str:
    """Call-to-action button followed by the raw link for clients that block buttons."""
    return (
        f'<p style="margin:28px 0;text-align:center;">'
        f'<a href="{url}" style="display:inline-block;padding:14px 32px;border-radius:8px;'
        f'background:{RED};color:#FFFFFF;font-weight:600;text-decoration:none;">{label}</a></p>'
        f'<hr style="border:0;border-top:1px solid {RULE};margin:24px 0;">'
        + _para(
            "Daca butonul nu functioneaza, copiaza acest link in browser:<br>"
            f'<a href="{url}" style="color:{RED};word-break:break-all;">{url}</a>',
            size=12,
        )
    )


def _page(*blocks: str) -> str:
    body = "\n".join(blocks)
    return (
        '<!DOCTYPE html>\n<html lang="ro">\n<head><meta charset="UTF-8">'
        f"<title>{APP_NAME}</title></head>\n"
        f'<body style="margin:0;padding:40px 16px;background:{PAGE};font-family:Helvetica,Arial,sans-serif;">\n'
        f'<div style="max-width:600px;margin:0 auto;">\n'
        f'<p style="text-align:center;font-size:22px;font-weight:700;color:{INK};">{APP_NAME}</p>\n'
        f'<div style="background:{CARD};border:1px solid {RULE};border-radius:12px;padding:36px 28px;">\n'
        f"{body}\n</div>\n"
        f'<p style="text-align:center;font-size:12px;color:{MUTED};">'
        f"Acest email a fost trimis de {APP_NAME}. Daca nu te asteptai la el, il poti ignora.</p>\n"
        "</div>\n</body>\n</html>"
    )


def _expiry_note() -> str:
    return f"Link-ul expira in {LINK_MINUTES} minute."


def confirm_account(username: str, confirm_url: str) -> tuple[str, str, str]:
    """Account confirmation email sent right after registration."""
    html_body = _page(
        _heading("Bine ai venit!"),
        _para(f"Salut {escape(username)},"),
        _para("Contul tau a fost creat. Confirma adresa de email pentru a te putea autentifica."),
        _action(confirm_url, "Confirma contul"),
        _para(_expiry_note(), size=13),
    )
    text_body = "\n\n".join(
        [
            f"Salut {username},",
            f"Contul tau a fost creat. Confirma adresa de email accesand link-ul:\n{confirm_url}",
            _expiry_note(),
            SIGNATURE,
        ]
    )
    return "Confirmare cont UCP", html_body, text_body


def password_reset(reset_url: str) -> tuple[str, str, str]:
    """Password reset email. The account name is deliberately left out."""
    untouched = "Daca nu ai cerut resetarea, parola ta ramane neschimbata."
    html_body = _page(
        _heading("Resetare parola"),
        _para("Am primit o cerere de resetare a parolei. Apasa butonul de mai jos pentru a alege o parola noua."),
        _action(reset_url, "Reseteaza parola"),
        _para(f"{_expiry_note()} {untouched}", size=13),
    )
    text_body = "\n\n".join(
        [
            "Resetare parola",
            f"Am primit o cerere de resetare a parolei. Alege o parola noua accesand link-ul:\n{reset_url}",
            _expiry_note(),
            untouched,
            SIGNATURE,
        ]
    )
    return "Resetare parola UCP", html_body, text_body


def character_accepted(username: str, character: str, reviewer: str) -> tuple[str, str, str]:
    html_body = _page(
        _heading("Caracter acceptat", GREEN),
        _para(f"Salut {escape(username)},"),
        _para(f"Caracterul {_strong(character)} a fost acceptat de {_strong(reviewer)}. Te asteptam pe server!"),
    )
    text_body = "\n\n".join(
        [
            f"Salut {username},",
            f"Caracterul {character} a fost acceptat de {reviewer}. Te asteptam pe server!",
            SIGNATURE,
        ]
    )
    return "SA-RP: Caracter acceptat", html_body, text_body


def character_rejected(username: str, character: str, reviewer: str, reason: str) -> tuple[str, str, str]:
    retry = "Poti propune un caracter nou din panoul de control."
    html_body = _page(
        _heading("Caracter refuzat", RED),
        _para(f"Salut {escape(username)},"),
        _para(f"Caracterul {_strong(character)} a fost refuzat de {_strong(reviewer)}."),
        _para(f"Motiv: {escape(reason)}"),
        _para(retry, size=13),
    )
    text_body = "\n\n".join(
        [
            f"Salut {username},",
            f"Caracterul {character} a fost refuzat de {reviewer}.\nMotiv: {reason}",
            retry,
            SIGNATURE,
        ]
    )
    return "SA-RP: Caracter refuzat", html_body, text_body
