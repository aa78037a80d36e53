import logging

from flask import current_app

from extensions import db
from metislap.models import LogEntry

logger = logging.getLogger(__name__)


def record_event(source, message):
    """Add a system log row to the current transaction and trim old rows."""
    logger.info("[%s] %s", source, message)
    db.session.add(LogEntry(source=source, message=str(message)))
    db.session.flush()

    limit = current_app.config.get("LOG_HISTORY_LIMIT", 1000)
    count = db.session.query(db.func.count(LogEntry.id)).scalar() or 0
    excess = max(0, count - limit)
    if excess > 0:
        old_ids = [row[0] for row in db.session.query(LogEntry.id)
                   .order_by(LogEntry.created_at.asc(), LogEntry.id.asc())
                   .limit(excess)
                   .all()]
        if old_ids:
            LogEntry.query.filter(LogEntry.id.in_(old_ids))\
                .delete(synchronize_session=False)


def recent_events(limit=100):
    return LogEntry.query.order_by(LogEntry.created_at.desc(), LogEntry.id.desc()).limit(limit).all()
