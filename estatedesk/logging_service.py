"""Activity logging for EstateDesk.

Every page view and record mutation is written to the ``system_log`` table so
the activity console can show what happened, to which portfolio, and why a
request failed. Entries are attributed to the signed-in user when there is one.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from flask import current_app, g, has_request_context

from .extensions import db
from .models import SystemLog


@dataclass(frozen=True)
class LogRecord:
    """Structured representation of a log message."""

    component: str
    action: str
    level: str
    result: str
    title: str
    user_summary: str
    technical_details: str
    correlation_id: str
    environment: str
    user_id: Optional[int] = None


def _request_user_id() -> Optional[int]:
    if not has_request_context():
        return None
    user = g.get("user")
    return user.id if user is not None else None


class LogManager:
    """Manage structured activity logging for the application."""

    def __init__(self) -> None:
        self.app = None
        self.available_levels = ["info", "warn", "error"]
        self.available_components: list[str] = []

    def init_app(self, app) -> None:
        """Attach the log manager to the Flask app."""
        self.app = app
        app.extensions["log_manager"] = self

    def _ensure_component(self, component: str) -> None:
        if component not in self.available_components:
            self.available_components.append(component)
            self.available_components.sort()

    def register_component(self, component: str) -> None:
        """Explicitly register a component name."""
        self._ensure_component(component)

    def record(
        self,
        *,
        component: str,
        action: str,
        level: str = "info",
        result: str = "success",
        title: str,
        user_summary: str,
        technical_details: str,
        correlation_id: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> LogRecord:
        """Persist a new log record and commit it."""
        if level not in self.available_levels:
            raise ValueError(f"Unsupported level '{level}'")

        self._ensure_component(component)
        config = (self.app or current_app).config
        environment = config.get("ENVIRONMENT", "development")
        correlation = correlation_id or str(uuid4())
        actor = user_id if user_id is not None else _request_user_id()

        db.session.add(
            SystemLog(
                user_id=actor,
                component=component,
                action=action,
                level=level,
                result=result,
                title=title,
                user_summary=user_summary,
                technical_details=technical_details,
                correlation_id=correlation,
                environment=environment,
            )
        )
        self._trim_logs(config.get("LOG_RETENTION", 200))
        db.session.commit()

        return LogRecord(
            component=component,
            action=action,
            level=level,
            result=result,
            title=title,
            user_summary=user_summary,
            technical_details=technical_details,
            correlation_id=correlation,
            environment=environment,
            user_id=actor,
        )

    def _trim_logs(self, retention: int) -> None:
        """Keep the number of stored logs under the configured retention."""
        total = SystemLog.query.count()
        if total <= retention:
            return
        excess = total - retention
        oldest_ids = [
            entry.id
            for entry in SystemLog.query.order_by(SystemLog.timestamp, SystemLog.id).limit(excess)
        ]
        if oldest_ids:
            SystemLog.query.filter(SystemLog.id.in_(oldest_ids)).delete(synchronize_session=False)

    def fetch_logs(
        self,
        *,
        user_id: Optional[int] = None,
        level: Optional[str] = None,
        component: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
    ) -> list[dict[str, object]]:
        """Retrieve structured logs with optional filtering."""
        query = SystemLog.query.order_by(SystemLog.timestamp.desc(), SystemLog.id.desc())
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        if level and level in self.available_levels:
            query = query.filter_by(level=level)
        if component:
            query = query.filter_by(component=component)
        if search:
            like_pattern = f"%{search}%"
            query = query.filter(
                (SystemLog.title.ilike(like_pattern))
                | (SystemLog.user_summary.ilike(like_pattern))
                | (SystemLog.technical_details.ilike(like_pattern))
                | (SystemLog.correlation_id.ilike(like_pattern))
            )
        return [record.serialize() for record in query.limit(limit).all()]

    def latest_timestamp(self, *, user_id: Optional[int] = None) -> Optional[str]:
        """Return ISO formatted timestamp of the most recent log entry."""
        from .settings.services import convert_to_active_timezone

        query = SystemLog.query
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        record = query.order_by(SystemLog.timestamp.desc()).first()
        if not record:
            return None
        return convert_to_active_timezone(record.timestamp).isoformat(timespec="seconds")


log_manager = LogManager()
