"""
Buyer identity for HTTP requests

Authentication happens upstream: the auth gateway forwards the verified
buyer id in the `X-Buyer-Id` header and this service trusts it.
"""

from typing import Optional
from uuid import UUID

from fastapi import Header

from src.platform.exception.exceptions import AuthenticationError


BUYER_ID_HEADER = 'X-Buyer-Id'


async def get_current_buyer_id(
    x_buyer_id: Optional[str] = Header(default=None, alias=BUYER_ID_HEADER),
) -> UUID:
    if not x_buyer_id:
        raise AuthenticationError('Not authenticated')
    try:
        return UUID(x_buyer_id)
    except ValueError as e:
        raise AuthenticationError('Invalid buyer identity') from e
