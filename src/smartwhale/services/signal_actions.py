"""User actions recorded against generated signals (followed, ignored, closed, ...)."""

from sqlmodel import Session, col, select

from smartwhale.db import SignalAction
from smartwhale.schemas import SignalActionCreate
from smartwhale.utils import utc_now


def upsert_action(session: Session, user_id: str, body: SignalActionCreate) -> SignalAction:
    """Create or replace the user's action on a signal."""
    action = session.exec(
        select(SignalAction).where(
            SignalAction.user_id == user_id, SignalAction.signal_id == body.signal_id
        )
    ).first()
    if action is None:
        action = SignalAction(user_id=user_id, signal_id=body.signal_id, action=body.action)
    action.action = body.action
    action.entry_price_actual = body.entry_price_actual
    action.position_size = body.position_size
    action.notes = body.notes
    action.updated_at = utc_now()
    session.add(action)
    session.commit()
    session.refresh(action)
    return action


def list_actions(session: Session, user_id: str, signal_id: str | None = None) -> list[SignalAction]:
    statement = select(SignalAction).where(SignalAction.user_id == user_id)
    if signal_id:
        statement = statement.where(SignalAction.signal_id == signal_id)
    return list(session.exec(statement.order_by(col(SignalAction.created_at).desc())).all())
