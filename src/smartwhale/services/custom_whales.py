"""User-defined whale addresses."""
from fastapi import HTTPException
from sqlmodel import Session, col, select

from smartwhale.db import CustomWhale
from smartwhale.providers.core import normalize_address
from smartwhale.schemas import CustomWhaleCreate
from smartwhale.utils import short_address


def list_custom_whales(session: Session, user_id: str) -> list[CustomWhale]:
    return list(
        session.exec(
            select(CustomWhale)
            .where(CustomWhale.user_id == user_id)
            .order_by(col(CustomWhale.created_at).desc())
        ).all()
    )


def add_custom_whale(session: Session, user_id: str, body: CustomWhaleCreate) -> CustomWhale:
    """Store a custom whale (address already validated and lowercased). Duplicate -> 400."""
    existing = session.exec(
        select(CustomWhale).where(CustomWhale.user_id == user_id, CustomWhale.address == body.address)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=400, detail="This whale is already in your list")
    whale = CustomWhale(
        user_id=user_id,
        address=body.address,
        name=(body.name or "").strip() or f"Whale {short_address(body.address)}",
        notes=body.notes,
        chain_id=body.chain_id,
    )
    session.add(whale)
    session.commit()
    session.refresh(whale)
    return whale


def delete_custom_whale(session: Session, user_id: str, whale_id: int | None = None,
                        address: str | None = None) -> None:
    """Delete by id or by address; unknown or foreign whales -> 404."""
    statement = select(CustomWhale).where(CustomWhale.user_id == user_id)
    if whale_id is not None:
        statement = statement.where(CustomWhale.id == whale_id)
    elif address:
        statement = statement.where(CustomWhale.address == normalize_address(address))
    else:
        raise HTTPException(status_code=400, detail="Whale id or address is required")
    whale = session.exec(statement).first()
    if whale is None:
        raise HTTPException(status_code=404, detail="Custom whale not found")
    session.delete(whale)
    session.commit()
