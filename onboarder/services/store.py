"""
Config / Role / Task store.

A transactional key-value view over the organizational data:

    roles     — Role records keyed by name
    tasks     — Task records keyed by subject
    taskmaps  — TaskMap records keyed by name
    config    — scalar settings

Contract:
    store.read(key)               → snapshot of a collection or a config scalar
    store.write_transaction(fn)   → fn(txn) runs inside one DB transaction;
                                    returns normally → commit,
                                    txn.abort()      → rollback, returns None,
                                    raises           → rollback, re-raised.

Every transaction (and every read) holds one process-wide lock, so
transactions are serialized. Never hold a transaction open across calls
to the issue tracker.
"""

import logging
import threading

from sqlalchemy import func, select

from onboarder.models import db
from onboarder.models.onboarding import ConfigSetting, Role, Task, TaskMap

logger = logging.getLogger(__name__)

_COLLECTIONS = frozenset({"roles", "tasks", "taskmaps"})


class TransactionAborted(Exception):
    """Raised by StoreTransaction.abort(); caught by write_transaction."""


class RecordSet:
    """Mutable view of one keyed collection inside a transaction."""

    def __init__(self, session, model, key_attr: str) -> None:
        self._session = session
        self._model = model
        self._key_attr = key_attr

    @property
    def _key_col(self):
        return getattr(self._model, self._key_attr)

    def __iter__(self):
        stmt = select(self._model).order_by(self._key_col)
        return iter(self._session.execute(stmt).scalars().all())

    def __len__(self) -> int:
        return self._session.scalar(select(func.count()).select_from(self._model)) or 0

    def __contains__(self, key) -> bool:
        return self.get(key) is not None

    def get(self, key):
        stmt = select(self._model).where(self._key_col == key)
        return self._session.execute(stmt).scalar_one_or_none()

    def put(self, record):
        """Insert ``record``, replacing any record with the same key.

        A record already loaded from this set is saved in place.
        """
        key = getattr(record, self._key_attr)
        existing = self.get(key)
        if existing is record:
            self._session.flush()
            return record
        if existing is not None:
            self._session.delete(existing)
            self._session.flush()
        self._session.add(record)
        self._session.flush()
        return record

    def delete(self, key) -> bool:
        existing = self.get(key)
        if existing is None:
            return False
        self._session.delete(existing)
        self._session.flush()
        return True

    def delete_where(self, predicate) -> int:
        removed = 0
        for record in list(self):
            if predicate(record):
                self._session.delete(record)
                removed += 1
        if removed:
            self._session.flush()
        return removed


class ConfigView:
    """Mutable mapping view of the scalar config inside a transaction."""

    def __init__(self, session) -> None:
        self._session = session

    def get(self, key, default=None):
        setting = self._session.get(ConfigSetting, key)
        if setting is None:
            return default
        return setting.value

    def __getitem__(self, key):
        setting = self._session.get(ConfigSetting, key)
        if setting is None:
            raise KeyError(key)
        return setting.value

    def __setitem__(self, key, value) -> None:
        setting = self._session.get(ConfigSetting, key)
        if setting is None:
            self._session.add(ConfigSetting(key=key, value=value))
        else:
            setting.value = value
        self._session.flush()

    def items(self):
        rows = self._session.execute(select(ConfigSetting).order_by(ConfigSetting.key)).scalars()
        return [(s.key, s.value) for s in rows]


class StoreTransaction:
    """Handed to the ``fn`` of Store.write_transaction."""

    def __init__(self, session) -> None:
        self.roles = RecordSet(session, Role, "name")
        self.tasks = RecordSet(session, Task, "subject")
        self.taskmaps = RecordSet(session, TaskMap, "name")
        self.config = ConfigView(session)

    def abort(self):
        """Discard every change made in this transaction."""
        raise TransactionAborted()


class Store:
    """Serialized, transactional access to roles, tasks, taskmaps and config.

    One instance per application (``app.extensions["store"]``).
    """

    def __init__(self, database=None) -> None:
        self._db = database if database is not None else db
        self._lock = threading.RLock()

    @property
    def session(self):
        return self._db.session

    def read(self, key: str):
        """Return a snapshot of ``key``.

        "roles" / "tasks" / "taskmaps" → list sorted by key,
        "config"                       → dict of every setting,
        anything else                  → that config scalar or None.
        """
        with self._lock:
            txn = StoreTransaction(self.session)
            if key in _COLLECTIONS:
                return list(getattr(txn, key))
            if key == "config":
                return dict(txn.config.items())
            return txn.config.get(key)

    def config(self, item: str):
        with self._lock:
            return ConfigView(self.session).get(item)

    def write_transaction(self, fn):
        """Run ``fn(txn)`` atomically; return its result (None on abort)."""
        with self._lock:
            session = self.session
            txn = StoreTransaction(session)
            try:
                result = fn(txn)
            except TransactionAborted:
                session.rollback()
                logger.info("Store transaction aborted; changes discarded")
                return None
            except Exception:
                session.rollback()
                raise
            session.commit()
            return result
