"""
Activity log writer.

Entries are written after the business commit and never block it: any
failure is rolled back, logged and swallowed.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from chest_api.core.security import CurrentUser
from chest_api.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


class ActivityLogger:
    def log(self, db: Session, actor: Optional[CurrentUser], action: str, **fields) -> None:
        if actor is None:
            return
        try:
            db.add(ActivityLog(user_id=actor.id, username=actor.username, action=action, **fields))
            db.commit()
            logger.info(f"[Activity] {action} by {actor.username}")
        except Exception as e:
            db.rollback()
            logger.error(f"[Activity] Could not record {action}: {e}")

    def chest_created(self, db: Session, actor, chest_id, chest_name: str) -> None:
        self.log(
            db, actor, "CREATE_CHEST",
            chest_id=str(chest_id),
            chest_name=chest_name,
            details=f'Created chest "{chest_name}"',
        )

    def quantity_changed(
        self, db: Session, actor, chest_id, chest_name: str,
        item_id: str, item_name: str, old_quantity: int, new_quantity: int,
    ) -> None:
        added = new_quantity > old_quantity
        change = abs(new_quantity - old_quantity)
        self.log(
            db, actor, "ADD_ITEM" if added else "REMOVE_ITEM",
            chest_id=str(chest_id),
            chest_name=chest_name,
            item_id=item_id,
            item_name=item_name,
            old_quantity=old_quantity,
            new_quantity=new_quantity,
            details=f"{'Added' if added else 'Removed'} {change} {item_name} {'to' if added else 'from'} {chest_name}",
        )

    def chest_deleted(self, db: Session, actor, chest_id, chest_name: str, details: str | None = None) -> None:
        self.log(
            db, actor, "DELETE_CHEST",
            chest_id=str(chest_id),
            chest_name=chest_name,
            details=details or f'Deleted chest "{chest_name}"',
        )

    def chest_renamed(self, db: Session, actor, chest_id, old_name: str, new_name: str) -> None:
        self.log(
            db, actor, "RENAME_CHEST",
            chest_id=str(chest_id),
            chest_name=new_name,
            details=f'Renamed chest "{old_name}" -> "{new_name}"',
        )

    def item_quantity_updated(self, db: Session, actor, item_id, item_name: str, old_quantity: int, new_quantity: int) -> None:
        self.log(
            db, actor, "UPDATE_ITEM_QUANTITY",
            item_id=str(item_id),
            item_name=item_name,
            old_quantity=old_quantity,
            new_quantity=new_quantity,
            details=f"Catalog quantity of {item_name}: {old_quantity} -> {new_quantity}",
        )

    def user_login(self, db: Session, actor, ip_address: str | None = None, user_agent: str | None = None) -> None:
        self.log(
            db, actor, "LOGIN",
            details=f"Login of {actor.username if actor else ''}",
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def user_logout(self, db: Session, actor) -> None:
        self.log(db, actor, "LOGOUT", details=f"Logout of {actor.username if actor else ''}")


activity_logger = ActivityLogger()
