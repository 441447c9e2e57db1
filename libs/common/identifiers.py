"""Member identifier normalization.

Door scanners and manual entry both produce free-form digit strings; every
record key uses the fixed-width, left-zero-padded form.
"""

IDENTIFIER_LENGTH = 10
IDENTIFIER_PATTERN = rf"^\d{{{IDENTIFIER_LENGTH}}}$"


class InvalidIdentifierError(ValueError):
    """Raised when raw input cannot be turned into a member identifier."""


def format_identifier(raw: str) -> str:
    """
    Normalize raw input to the padded identifier form.

    Args:
        raw: Digits as typed or scanned, surrounding whitespace allowed

    Returns:
        The identifier left-padded with zeros to ``IDENTIFIER_LENGTH`` digits

    Raises:
        InvalidIdentifierError: empty, non-numeric or too long input
    """
    value = (raw or "").strip()
    if not value:
        raise InvalidIdentifierError("Identifier is required")
    if not value.isdigit() or not value.isascii():
        raise InvalidIdentifierError("Identifier must contain only digits")
    if len(value) > IDENTIFIER_LENGTH:
        raise InvalidIdentifierError(
            f"Identifier cannot be longer than {IDENTIFIER_LENGTH} digits"
        )
    return value.zfill(IDENTIFIER_LENGTH)
