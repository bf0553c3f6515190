# composition_service/shared/utils/input_validation.py

import re
from typing import Optional, Tuple

import regex


class InputValidator:
    """
    Validação e sanitização de entradas de usuário.

    Logins, senhas, títulos e descrições do catálogo.
    """

    # ─────────────────────────────────────────────────────────────
    # Constantes de limites
    MIN_LOGIN_LENGTH = 3
    MAX_LOGIN_LENGTH = 64
    MIN_PASSWORD_LENGTH = 6
    MAX_PASSWORD_LENGTH = 72  # limite do bcrypt
    MAX_TITLE_LENGTH = 255
    MAX_TEXT_LENGTH = 5000

    # ─────────────────────────────────────────────────────────────
    # Expressões Regulares

    # Login: letras ASCII, dígitos, ponto, underline e hífen
    LOGIN_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")

    # Título (TITLE_PATTERN):
    # - \p{L} / \p{M}: letras de qualquer idioma e acentos
    # - \p{N}: dígitos (inclui números sobrescritos como ♭3)
    # - pontuação comum e espaço
    TITLE_PATTERN = regex.compile(
        r"^[\p{L}\p{M}\p{N}\p{So} .,:;'()#&+/!?♯♭-]+$",
        flags=regex.UNICODE,
    )

    # Caracteres perigosos para campos livres
    DANGEROUS_CHARS = re.compile(r"[<>{}]")

    # ─────────────────────────────────────────────────────────────

    @classmethod
    def validate_login(cls, login: str) -> Tuple[bool, Optional[str]]:
        if not login:
            return False, "Login is required."
        if not cls.MIN_LOGIN_LENGTH <= len(login) <= cls.MAX_LOGIN_LENGTH:
            return False, (
                f"Login must have between {cls.MIN_LOGIN_LENGTH} "
                f"and {cls.MAX_LOGIN_LENGTH} characters."
            )
        if not cls.LOGIN_PATTERN.match(login):
            return False, "Login may only contain letters, digits, '.', '_' and '-'."
        return True, None

    @classmethod
    def validate_password(cls, password: str) -> Tuple[bool, Optional[str]]:
        if not password:
            return False, "Password is required."
        if len(password) < cls.MIN_PASSWORD_LENGTH:
            return False, f"Password must have at least {cls.MIN_PASSWORD_LENGTH} characters."
        if len(password.encode("utf-8")) > cls.MAX_PASSWORD_LENGTH:
            return False, f"Password must have at most {cls.MAX_PASSWORD_LENGTH} bytes."
        return True, None

    @classmethod
    def validate_title(cls, title: str) -> Tuple[bool, Optional[str]]:
        if not title or not title.strip():
            return False, "Title must not be empty."
        if len(title) > cls.MAX_TITLE_LENGTH:
            return False, f"Title must have at most {cls.MAX_TITLE_LENGTH} characters."
        if not cls.TITLE_PATTERN.match(title):
            return False, "Title contains invalid characters."
        return True, None

    @classmethod
    def validate_text(cls, text: str) -> Tuple[bool, Optional[str]]:
        if len(text) > cls.MAX_TEXT_LENGTH:
            return False, f"Text must have at most {cls.MAX_TEXT_LENGTH} characters."
        if cls.DANGEROUS_CHARS.search(text):
            return False, "Text contains forbidden characters."
        return True, None
