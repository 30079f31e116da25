"""Path/query validation shared by routers."""
from fastapi import HTTPException

from smartwhale.utils import is_valid_address


def require_address(address: str) -> str:
    """Return the trimmed address or raise HTTPException(400) when malformed."""
    address = address.strip()
    if not is_valid_address(address):
        raise HTTPException(status_code=400, detail="Invalid Ethereum address format")
    return address
