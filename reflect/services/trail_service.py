"""
Trail Service
=============

Audit trail writer. Routers schedule ``add`` through BackgroundTasks, so it
runs after the response in its own session; a failed write is logged and
never reaches the caller.
"""

import logging
from typing import Callable, ContextManager

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from reflect.core.database import get_session_context
from reflect.models.trail import Trail

logger = logging.getLogger(__name__)


class TrailService:
    def __init__(self, session_factory: Callable[[], ContextManager[Session]] = get_session_context):
        self._session_factory = session_factory

    def add(self, action: str, action_item: str, action_item_id: str, user_id: int) -> None:
        try:
            with self._session_factory() as session:
                session.add(
                    Trail(
                        action=action,
                        action_item=action_item,
                        action_item_id=action_item_id,
                        action_by_id=user_id,
                    )
                )
                session.commit()
        except SQLAlchemyError as exc:
            logger.error(
                "trail_write_failed",
                extra={"action": action, "action_item_id": action_item_id, "error": str(exc)},
            )
            return
        logger.info("trail_recorded", extra={"action": action, "action_item_id": action_item_id})


def get_trail_service() -> TrailService:
    return TrailService()
