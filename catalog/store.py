"""
catalog/store.py -- Thread-safe in-memory repositories for products and orders.

Pattern: Repository. EntityStore owns one ordered collection of dataclass
entities plus the lock guarding it. ProductStore and OrderStore are the two
instantiations the API wires into app.state; route handlers never touch the
underlying list.

Concurrency:
  Route handlers declared with `def` run in Starlette's thread pool, so a store
  is hit by truly parallel workers. Reads (list_all, get_by_id, count) share a
  reader lock. Every write holds the writer lock across its lookup and its
  mutation. For create() that means the max-id scan and the append happen in a
  single critical section, so two concurrent creates can never be handed the
  same id.

Copy semantics:
  Every entity going in or out is deep-copied. A caller mutating a returned
  Product (or its attributes dict) cannot corrupt store state.

Nothing here is persisted -- data lives for the process lifetime only.

Usage:
    products = ProductStore()
    created = products.create(Product(sku="BULB-007", name="EcoBright 7W", price=500, stock_qty=20))
    products.get_by_id(created.id)
    products.update(created.id, replacement)
    products.delete(created.id)

    orders = OrderStore()
    orders.patch_status(1, OrderStatus.shipped)
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import fields, replace
from datetime import datetime, timedelta, timezone
from typing import Generic, Optional, TypeVar, Union

from catalog.models import Order, OrderStatus, Product

logger = logging.getLogger("lampshop.store")

E = TypeVar("E", Product, Order)

# Fields owned by the store. update() never copies these from the replacement.
_STORE_MANAGED = frozenset({"id", "created_at", "updated_at"})


class NotFound(LookupError):
    """No live entity of the given kind carries the requested id."""

    def __init__(self, kind: str, entity_id: int) -> None:
        super().__init__(f"{kind} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id


# ---------------------------------------------------------------------------
# Reader/writer lock
# ---------------------------------------------------------------------------


class ReadWriteLock:
    """Many concurrent readers or exactly one writer.

    Waiting writers block new readers, so a steady stream of list requests
    cannot starve a create. Not reentrant: a thread holding either side must
    not acquire again.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _next_stamp(previous: Optional[datetime]) -> datetime:
    """Return now, bumped past `previous` if the clock has not advanced.

    Coarse system clocks can return the same instant for a create and an
    immediately following update; updated_at must still move forward.
    """
    now = _utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class EntityStore(Generic[E]):
    """Ordered in-memory collection of one entity kind with id assignment."""

    kind = "entity"

    def __init__(self, entities: Iterable[E] = ()) -> None:
        self._lock = ReadWriteLock()
        self._entities: list[E] = []
        self.seed(entities)

    # -- reads ---------------------------------------------------------------

    def list_all(self) -> list[E]:
        """Return a deep copy of every live entity in insertion order."""
        with self._lock.read_locked():
            return copy.deepcopy(self._entities)

    def get_by_id(self, entity_id: int) -> E:
        """Return a copy of the entity with this id. Raises NotFound."""
        with self._lock.read_locked():
            _, entity = self._find(entity_id)
            return copy.deepcopy(entity)

    def count(self) -> int:
        with self._lock.read_locked():
            return len(self._entities)

    # -- writes --------------------------------------------------------------

    def create(self, entity: E) -> E:
        """Store a new entity and return the stored copy.

        Any id or timestamps on the input are ignored: the new id is the
        current maximum plus one (1 for an empty store), and created_at and
        updated_at are both set to now. Other fields are taken as given.
        """
        with self._lock.write_locked():
            new_id = max((e.id for e in self._entities), default=0) + 1
            now = _utcnow()
            created = replace(copy.deepcopy(entity), id=new_id, created_at=now, updated_at=now)
            self._entities.append(created)
            logger.debug("Created %s %d", self.kind, new_id)
            return copy.deepcopy(created)

    def update(self, entity_id: int, replacement: E) -> E:
        """Replace every mutable field of an entity. Raises NotFound.

        id and created_at are preserved; updated_at is refreshed.
        """
        with self._lock.write_locked():
            index, current = self._find(entity_id)
            changes = {
                f.name: copy.deepcopy(getattr(replacement, f.name))
                for f in fields(current)
                if f.name not in _STORE_MANAGED
            }
            updated = replace(current, **changes, updated_at=_next_stamp(current.updated_at))
            self._entities[index] = updated
            logger.debug("Updated %s %d", self.kind, entity_id)
            return copy.deepcopy(updated)

    def delete(self, entity_id: int) -> None:
        """Remove an entity. Raises NotFound."""
        with self._lock.write_locked():
            index, _ = self._find(entity_id)
            del self._entities[index]
            logger.debug("Deleted %s %d", self.kind, entity_id)

    def seed(self, entities: Iterable[E]) -> None:
        """Load entities that already carry their ids (demo data, fixtures).

        Missing timestamps are stamped with now. A duplicate or missing id is
        a programming error and raises ValueError before anything is stored.
        """
        incoming = [copy.deepcopy(e) for e in entities]
        if not incoming:
            return
        with self._lock.write_locked():
            taken = {e.id for e in self._entities}
            for entity in incoming:
                if entity.id is None or entity.id in taken:
                    raise ValueError(f"cannot seed {self.kind} with id {entity.id!r}")
                taken.add(entity.id)
            now = _utcnow()
            for entity in incoming:
                created_at = entity.created_at or now
                self._entities.append(
                    replace(entity, created_at=created_at, updated_at=entity.updated_at or created_at)
                )
        logger.debug("Seeded %d %s record(s)", len(incoming), self.kind)

    # -- internals -----------------------------------------------------------

    def _find(self, entity_id: int) -> tuple[int, E]:
        # Caller must hold the lock (either side).
        for index, entity in enumerate(self._entities):
            if entity.id == entity_id:
                return index, entity
        raise NotFound(self.kind, entity_id)


class ProductStore(EntityStore[Product]):
    kind = "product"


class OrderStore(EntityStore[Order]):
    kind = "order"

    def patch_status(self, order_id: int, status: Union[OrderStatus, str]) -> Order:
        """Overwrite only the status of an order. Raises NotFound.

        No transition check is made: Delivered -> Pending is accepted. A value
        outside OrderStatus raises ValueError before the lock is taken.
        """
        new_status = OrderStatus(status)
        with self._lock.write_locked():
            index, current = self._find(order_id)
            updated = replace(current, status=new_status, updated_at=_next_stamp(current.updated_at))
            self._entities[index] = updated
            logger.debug("Order %d status -> %s", order_id, new_status.value)
            return copy.deepcopy(updated)
