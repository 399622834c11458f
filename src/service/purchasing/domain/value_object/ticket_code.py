import secrets


TICKET_CODE_PREFIX = 'TKT'
TICKET_CODE_ENTROPY_BYTES = 16  # 128 bits


def generate_ticket_code() -> str:
    """Opaque lookup token printed on the ticket (the QR payload). Not a secret."""
    return f'{TICKET_CODE_PREFIX}-{secrets.token_hex(TICKET_CODE_ENTROPY_BYTES).upper()}'
