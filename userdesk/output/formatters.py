import json
from typing import Any

COLUMNS = [
    ("id", "ID"),
    ("first_name", "First Name"),
    ("last_name", "Last Name"),
    ("email", "Email"),
    ("department", "Department"),
]


def format_output(data: Any, output_format: str = "plain") -> str:
    if output_format == "json":
        return json.dumps(data, indent=2)
    return format_plain(data)


def format_plain(data: Any) -> str:
    if data is None:
        return ""

    if isinstance(data, str):
        return data

    if isinstance(data, dict):
        if "error" in data and data["error"]:
            return f"Error: {data['error']}"

        if "errors" in data:
            return format_validation_errors(data["errors"])

        if "users" in data:
            lines = [format_users(data["users"])]
            if "page" in data and "page_count" in data and data["page_count"] > 1:
                lines.append("")
                lines.append(f"Page {data['page'] + 1} of {data['page_count']} ({data.get('total', len(data['users']))} users)")
            if data.get("message"):
                lines.append("")
                lines.append(data["message"])
            return "\n".join(lines)

        if "message" in data:
            return data["message"] or ""

        if "config_path" in data:
            return format_config(data)

        return json.dumps(data, indent=2)

    if isinstance(data, list):
        if not data:
            return "No results"
        return "\n".join(format_plain(item) for item in data)

    return str(data)


def format_users(users: list[dict]) -> str:
    if not users:
        return "No users"

    rows = [[header for _, header in COLUMNS]]
    for user in users:
        row = []
        for key, _ in COLUMNS:
            value = user.get(key, "")
            if key == "last_name" and not value:
                value = "-"
            row.append(str(value))
        rows.append(row)

    widths = [max(len(row[i]) for row in rows) for i in range(len(COLUMNS))]
    lines = []
    for n, row in enumerate(rows):
        lines.append("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())
        if n == 0:
            lines.append("  ".join("-" * width for width in widths))

    return "\n".join(lines)


FIELD_LABELS = {
    "first_name": "First Name",
    "last_name": "Last Name",
    "email": "Email",
    "department": "Department",
}


def format_validation_errors(errors: dict[str, str]) -> str:
    lines = ["Invalid form:"]
    for field, message in errors.items():
        lines.append(f"  {FIELD_LABELS.get(field, field)}: {message}")
    return "\n".join(lines)


def format_config(data: dict) -> str:
    lines = [f"Config file: {data['config_path']}", ""]
    if data.get("exists"):
        lines.append(data.get("contents", ""))
    else:
        lines.append("(file does not exist, using defaults)")
    return "\n".join(lines)
