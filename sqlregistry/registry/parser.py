"""
Parse statement files into named query blocks.

File format::

    -- get_user
    SELECT * FROM users WHERE id = $1;
    -- list_users
    SELECT * FROM users;

The ``--`` sequence only separates blocks here; it is not treated as a SQL
comment. Each block is a name line followed by the statement body.
"""

import re

BLOCK_DELIMITER = "--"

# Single-quoted literal (skipped), $N, or an anonymous %s / ? placeholder.
PLACEHOLDER_RE = re.compile(r"'(?:[^']|'')*'|\$(\d+)|(%s|\?)")


def parse_query_blocks(content: str) -> list[tuple[str, str]]:
    """
    Split file content into (name, query) pairs, in file order.

    Empty blocks and blocks without a body (no newline after the name) are skipped.
    Name and body are whitespace-trimmed.
    """
    pairs: list[tuple[str, str]] = []
    for block in content.split(BLOCK_DELIMITER):
        block = block.strip()
        if not block:
            continue
        name, sep, body = block.partition("\n")
        if not sep:
            continue
        pairs.append((name.strip(), body.strip()))
    return pairs


def count_query_parameters(query: str) -> int:
    """
    Number of positional parameters query expects (0 if none).

    With $N placeholders this is the highest N; otherwise the number of %s / ?
    placeholders. Placeholders inside quoted literals are ignored.
    """
    numbered: list[int] = []
    anonymous = 0
    for m in PLACEHOLDER_RE.finditer(query):
        if m.group(1) is not None:
            numbered.append(int(m.group(1)))
        elif m.group(2) is not None:
            anonymous += 1
    return max(numbered) if numbered else anonymous


def describe_query_parameters(query: str) -> str:
    """Generic parameter names, e.g. "$1, $2" (empty string when there are none)."""
    return ", ".join(f"${i}" for i in range(1, count_query_parameters(query) + 1))
