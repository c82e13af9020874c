"""Tokenizer for free-form deployer option strings."""

from typing import List

QUOTE_CHARS = ("'", '"')


def parse_options(options: str) -> List[str]:
    """
    Split an options string into argv tokens.

    Unquoted spaces separate tokens. A single or double quote opens a quoted
    run and the matching quote closes it; both are dropped. The other quote
    character is literal inside a quoted run. An unterminated quote runs to
    the end of the string. Backslashes have no special meaning and empty
    tokens are dropped.

    Args:
        options: Raw options string (may be empty)

    Returns:
        List of tokens, e.g. ``--tag="v1.0" --flag`` -> ``["--tag=v1.0", "--flag"]``
    """
    tokens: List[str] = []
    current: List[str] = []
    quote = None

    for char in options:
        if quote is not None:
            if char == quote:
                quote = None
            else:
                current.append(char)
        elif char in QUOTE_CHARS:
            quote = char
        elif char == " ":
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append("".join(current))

    return tokens
