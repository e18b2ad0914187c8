import re

_ESCAPED_CHAR_RE = re.compile(r"\\(.)")


def escape_label(text: str) -> str:
    # Backslashes first, otherwise the quote escapes get doubled.
    return (
        str(text)
        .replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", " ")
        .strip()
    )


def unescape_value(text: str) -> str:
    return _ESCAPED_CHAR_RE.sub(lambda match: match.group(1), text)


def quoted(key: str, value: str) -> str:
    return f'{key}:"{escape_label(value)}"'
