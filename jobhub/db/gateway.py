# jobhub/db/gateway.py
"""
Table-scoped CRUD over the marketplace tables.

Rows go in and come out as plain dicts of column values, detached from any session.
Every call is a single attempt; failures raise GatewayError tagged with the operation,
the table and the kind of failure.
"""

import logging
from typing import Iterable, Optional, Union

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from jobhub.db.models import (
    Business, Worker, Job, WorkerNotification, JobApplication, AdminNotification, WorkerRequest
)
from jobhub.errors import GatewayError
from jobhub.realtime import ChangeFeed, Subscription, change_feed

log = logging.getLogger(__name__)

TABLES = {
    "businesses": Business,
    "workers": Worker,
    "jobs": Job,
    "worker_notifications": WorkerNotification,
    "job_applications": JobApplication,
    "admin_notifications": AdminNotification,
    "worker_requests": WorkerRequest,
}


def row_to_dict(obj, embed: Iterable[str] = ()) -> dict:
    """ Column values of an ORM object, plus the named relationships as nested dicts. """
    mapper = inspect(obj).mapper
    row = {attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs}
    for name in embed:
        related = getattr(obj, name)
        if related is None:
            row[name] = None
        elif isinstance(related, list):
            row[name] = [row_to_dict(item) for item in related]
        else:
            row[name] = row_to_dict(related)
    return row


class DataGateway:
    def __init__(self, session_factory=None, feed: Optional[ChangeFeed] = None):
        if session_factory is None:
            from jobhub.db.database import Session
            session_factory = Session
        self.session_factory = session_factory
        self.feed = feed if feed is not None else change_feed

    def _model(self, table: str, operation: str):
        model = TABLES.get(table)
        if model is None:
            raise GatewayError(f"Unknown table '{table}'.", operation, table, kind="unknown_table")
        return model

    def _column(self, model, name: str, operation: str, table: str):
        if name not in model.__table__.columns:
            raise GatewayError(f"Unknown column '{name}'.", operation, table, kind="unknown_table")
        return getattr(model, name)

    def fetch(self, table: str, filters: Optional[dict] = None, order: Optional[str] = None,
              embed: Iterable[str] = (), limit: Optional[int] = None) -> list:
        """
        Rows of table matching every equality in filters.
        order names a column, '-column' for descending; ties are broken by id the same way.
        embed names relationships to nest in each row.
        """
        model = self._model(table, "fetch")
        embed = tuple(embed)
        with self.session_factory() as session:
            try:
                query = session.query(model)
                for name, value in (filters or {}).items():
                    query = query.filter(self._column(model, name, "fetch", table) == value)
                if order:
                    descending = order.startswith("-")
                    column = self._column(model, order.lstrip("-"), "fetch", table)
                    if descending:
                        query = query.order_by(column.desc(), model.id.desc())
                    else:
                        query = query.order_by(column.asc(), model.id.asc())
                if limit is not None:
                    query = query.limit(limit)
                rows = [row_to_dict(obj, embed) for obj in query.all()]
                log.debug(f"Fetched {len(rows)} row(s) from '{table}' with filters {filters or {}}.")
                return rows
            except GatewayError:
                raise
            except SQLAlchemyError as e:
                log.error(f"Error fetching from '{table}': {e}", exc_info=True)
                raise GatewayError(f"Could not read from {table}.", "fetch", table) from e

    def fetch_one(self, table: str, filters: dict, embed: Iterable[str] = ()) -> Optional[dict]:
        rows = self.fetch(table, filters, order="id", embed=embed, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, rows: Union[dict, list]) -> list:
        """ Inserts one row or a batch in a single transaction and publishes the created rows. """
        model = self._model(table, "insert")
        batch = [rows] if isinstance(rows, dict) else list(rows)
        if not batch:
            return []
        with self.session_factory() as session:
            try:
                objects = [model(**values) for values in batch]
                session.add_all(objects)
                session.commit()
                created = [row_to_dict(obj) for obj in objects]
            except TypeError as e:
                session.rollback()
                log.warning(f"Rejected insert into '{table}': {e}")
                raise GatewayError(f"Invalid {table} row: {e}", "insert", table, kind="unknown_table") from e
            except SQLAlchemyError as e:
                session.rollback()
                log.error(f"Error inserting into '{table}': {e}", exc_info=True)
                raise GatewayError(f"Could not write to {table}.", "insert", table) from e
        log.info(f"Inserted {len(created)} row(s) into '{table}'.")
        for row in created:
            self.feed.publish(table, row)
        return created

    def update(self, table: str, id: int, patch: dict) -> dict:
        model = self._model(table, "update")
        with self.session_factory() as session:
            try:
                obj = session.get(model, id)
                if obj is None:
                    raise GatewayError(f"No {table} row with id {id}.", "update", table, kind="not_found")
                for name, value in patch.items():
                    self._column(model, name, "update", table)
                    setattr(obj, name, value)
                session.commit()
                row = row_to_dict(obj)
            except GatewayError:
                session.rollback()
                raise
            except SQLAlchemyError as e:
                session.rollback()
                log.error(f"Error updating '{table}' id={id}: {e}", exc_info=True)
                raise GatewayError(f"Could not update {table}.", "update", table) from e
        log.info(f"Updated '{table}' id={id}: {sorted(patch)}")
        return row

    def subscribe_insert(self, table: str, on_row, filter: Optional[dict] = None) -> Subscription:
        model = self._model(table, "subscribe")
        for name in (filter or {}):
            self._column(model, name, "subscribe", table)
        return self.feed.subscribe(table, on_row, filter)
