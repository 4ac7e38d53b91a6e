"""User-facing message catalog (Romanian, the game community's language).

Every error returned to a player comes from here. Internal diagnostics go
to the log only.
"""

from __future__ import annotations

INTERNAL_ERROR = "A aparut o eroare interna."
MISSING_FIELDS = "Unul sau mai multe campuri nu sunt completate."

# --- Registration / validation ---
INVALID_EMAIL = "Adresa de email folosita este invalida."
INVALID_USERNAME = "Numele contului nu poate contine spatii si caractere speciale."
WEAK_PASSWORD = "Parola trebuie sa aiba minim 8 caractere (litere, cifre si caractere speciale)"
DUPLICATE_ACCOUNT = "Exista deja un cont cu acest nume sau aceasta adresa de mail."
EMAIL_NOT_SENT = "Nu a putut fi trimis mailul catre adresa oferita."

# --- Tokens ---
MISSING_TOKEN_PARAMS = "Parametrii trebuie completati."
TOKEN_INVALID = "Token-ul este incorect."
TOKEN_EXPIRED = "Token-ul a expirat."
ACCOUNT_NOT_ACTIVATED_BY_TOKEN = "Contul nu poate fi activat."

# --- Login / session ---
BAD_CREDENTIALS = "Numele sau parola sunt gresite."
BANNED = "Contul tau este banat."
NOT_ACTIVATED = "Contul nu este activat. Verifica adresa de email."
ALREADY_LOGGED_IN = "Esti deja autentificat."
NOT_LOGGED_IN = "Trebuie sa fii autentificat pentru a accesa aceasta resursa."
NO_PRIVILEGE = "Nu ai drepturile necesare pentru a accesa aceasta resursa."

# --- Characters ---
CHARACTER_NAME_EMPTY = "Numele caracterului trebuie completat."
CHARACTER_NAME_INVALID = "Numele caracterului trebuie sa fie de forma Prenume_Nume."
CHARACTER_ORIGIN_EMPTY = "Originea caracterului trebuie completata."
CHARACTER_ORIGIN_INVALID = "Originea caracterului trebuie sa contina doar litere."
CHARACTER_ORIGIN_SHORT = "Originea caracterului trebuie aiba minim 4 caractere."
CHARACTER_AGE_INVALID = "Varsta caracterului trebuie sa fie intre 12 si 80 de ani."
CHARACTER_QUOTA = "Ai atins numarul maxim de caractere."
CHARACTER_DUPLICATE = "Un caracter a fost deja creat cu acest nume."
CHARACTER_NOT_FOUND = "Caracterul nu a putut fi gasit."
CHARACTER_NOT_ACCEPTED = "Caracterul nu a putut fi acceptat."
CHARACTER_NOT_REJECTED = "Caracterul nu a putut fi refuzat."

# --- Moderation ---
BAN_INVALID_EXPIRE = "Durata banului trebuie sa fie intre 1 si 29 de zile."
BAN_SUBJECT_NOT_FOUND = "Jucatorul nu a putut fi banat."
UNBAN_NOT_FOUND = "Jucatorul nu a putut fi debanat."
JAIL_FAILED = "Jucatorul nu a putut fi sanctionat."
LOG_CATEGORY_INVALID = "Categoria de log-uri este invalida."
