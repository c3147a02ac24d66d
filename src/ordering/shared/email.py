"""Structural email address check shared by customers and order snapshots."""

_FORBIDDEN = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


def is_valid_email(email: str | None) -> bool:
    """Exactly one @, non-empty local and dotted domain parts, no whitespace or forbidden characters."""
    if not email or any(c in email for c in " \t\n"):
        return False
    if email.count("@") != 1:
        return False

    local_part, domain_part = email.split("@", 1)

    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        return False
    if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        return False
    if "." not in domain_part or ".." in local_part or ".." in domain_part:
        return False
    if any(label.startswith("-") or label.endswith("-") for label in domain_part.split(".")):
        return False

    return not any(c in email for c in _FORBIDDEN)
