"""Participant code generation."""

from typing import Collection

CODE_WIDTH = 3


def generate_code(team_prefix: str, existing_codes: Collection[str]) -> str:
    """
    Return the first free code for a team.

    Codes are the team prefix followed by a zero-padded counter starting at
    1 (``QU001``, ``QU002``, ...). Past 999 the number simply grows wider
    (``QU1000``).
    """
    taken = existing_codes if isinstance(existing_codes, (set, frozenset)) else set(existing_codes)
    counter = 1
    while True:
        code = f"{team_prefix}{counter:0{CODE_WIDTH}d}"
        if code not in taken:
            return code
        counter += 1
