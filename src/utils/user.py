# src/utils/user.py

from typing import Optional


def get_display_name(name: Optional[str] = None, email: Optional[str] = None, external_id: Optional[str] = None) -> str:
    """
    Формирует отображаемое имя пользователя:
    1. Если провайдер прислал имя - оно (без крайних пробелов).
    2. Если имени нет - локальная часть email.
    3. Если и email нет - внешний id.
    """
    if name and name.strip():
        return name.strip()
    if email and "@" in email:
        local = email.split("@", 1)[0].strip()
        if local:
            return local
    if external_id:
        return str(external_id)
    return ""


def default_group_name(display_name: str) -> str:
    """Имя группы, которая заводится при первом входе: "Priya" -> "Priya's Menu"."""
    return f"{display_name}'s Menu"
