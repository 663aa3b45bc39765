"""Генерация логинов и паролей для новых участников групп."""

import random
import re
import secrets
import string

SYMBOLS = "!@#$%^&*"
PASSWORD_LENGTH = 12

_NOT_LETTERS = re.compile(r"[^a-zA-Z]")

_rng = random.SystemRandom()


def generate_username(name: str, role: str) -> str:
    """
    Логин вида <первые 6 латинских букв имени><3 буквы роли><100-999>.

    Пример: ("Ahmed Ali", "editor") -> "ahmedaedi427".
    """
    clean_name = _NOT_LETTERS.sub("", name).lower()[:6]
    role_prefix = role.lower()[:3]
    return f"{clean_name}{role_prefix}{_rng.randint(100, 999)}"


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """
    Пароль с минимум одной строчной, заглавной буквой, цифрой и символом.
    """
    pools = [string.ascii_lowercase, string.ascii_uppercase, string.digits, SYMBOLS]
    alphabet = "".join(pools)

    chars = [secrets.choice(pool) for pool in pools]
    chars.extend(secrets.choice(alphabet) for _ in range(max(length, len(pools)) - len(pools)))
    _rng.shuffle(chars)
    return "".join(chars)
