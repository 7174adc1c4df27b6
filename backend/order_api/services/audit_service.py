"""Audit trail for authentication events."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from order_api.models.audit import AuditEvent

logger = logging.getLogger(__name__)


class AuditService:
    """Persist immutable audit trail entries."""

    @staticmethod
    def log_event(
        db: Session,
        *,
        action: str,
        outcome: str,
        user_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditEvent]:
        event = AuditEvent(
            user_id=user_id,
            action=action,
            outcome=outcome,
            ip_address=ip_address,
            metadata_json=json.dumps(metadata or {}, ensure_ascii=False),
        )
        try:
            db.add(event)
            db.commit()
        except SQLAlchemyError:
            # The audited operation already finished; losing the trail entry
            # must not change its result.
            db.rollback()
            logger.exception("Failed to record audit event %s/%s", action, outcome)
            return None
        db.refresh(event)
        return event


audit_service = AuditService()
