"""Masking helpers for values echoed back to clients as hints."""


def mask_phone_number(phone: str) -> str:
    """Replace all but the last three digits with '*' (e.g. '*******210').

    Numbers of four characters or fewer are fully masked.
    """
    if not phone:
        return ""
    if len(phone) <= 4:
        return "*" * len(phone)
    return "*" * (len(phone) - 3) + phone[-3:]


def mask_email(email: str) -> str:
    """Keep the first two characters of the local part and the domain ('al***@example.com')."""
    if not email or "@" not in email:
        return "***"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"
