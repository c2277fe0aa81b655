import re


def normalize_phrase(value: str | None) -> str:
    if not value:
        return ""
    clean = value.strip().lower()
    clean = re.sub(r"\s+", " ", clean)
    return clean


def dedupe(values: list[str] | tuple[str, ...] | None) -> list[str]:
    return list(dict.fromkeys(values or ()))
