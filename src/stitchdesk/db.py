from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass

import psycopg
from psycopg import Connection
from psycopg import errors as pg_errors

from .config import DbConfig

log = logging.getLogger(__name__)


class DbError(Exception):
    pass


class NotFound(Exception):
    """No record exists for the requested id."""

    def __init__(self, kind: str, record_id: object) -> None:
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class PermissionDenied(Exception):
    """The database rejected a read or write for the current role."""

    def __init__(self, operation: str, target: str) -> None:
        super().__init__(f"Permission denied: cannot {operation} on {target}.")
        self.operation = operation
        self.target = target


@dataclass(frozen=True)
class Db:
    cfg: DbConfig

    def connect(self) -> Connection:
        try:
            return psycopg.connect(
                host=self.cfg.host,
                port=self.cfg.port,
                dbname=self.cfg.name,
                user=self.cfg.user,
                password=self.cfg.password,
                sslmode=self.cfg.sslmode,
            )
        except Exception as e:
            raise DbError(
                "Cannot connect to database. Check config.toml [db] and that PostgreSQL is running."
            ) from e

    @contextmanager
    def session(self) -> Connection:
        conn = self.connect()
        try:
            yield conn
        except pg_errors.InsufficientPrivilege as e:
            log.warning("read rejected: %s", e)
            raise PermissionDenied("read", self.cfg.name) from e
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Connection:
        conn = self.connect()
        try:
            conn.execute("BEGIN;")
            yield conn
            conn.execute("COMMIT;")
        except pg_errors.InsufficientPrivilege as e:
            conn.execute("ROLLBACK;")
            log.warning("write rejected: %s", e)
            raise PermissionDenied("write", self.cfg.name) from e
        except Exception:
            conn.execute("ROLLBACK;")
            raise
        finally:
            conn.close()
