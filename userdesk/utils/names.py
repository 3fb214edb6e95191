def split_full_name(full_name: str) -> tuple[str, str]:
    """Split a display name into (first_name, last_name).

    The first token is the first name and everything after it is the last
    name, so "Mary Ann Smith" becomes ("Mary", "Ann Smith").
    """
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def combine_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}".strip()
