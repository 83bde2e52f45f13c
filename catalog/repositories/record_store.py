# catalog/repositories/record_store.py
"""
Colecție indexată, protejată de un lock exclusiv și persistată într-un fișier SQLite.

Disciplina de lock:
- fiecare operație ține lock-ul colecției pe toată durata ei, inclusiv commit-ul;
- înregistrările din memorie nu se modifică pe loc: mutațiile lucrează pe o copie
  (draft) care înlocuiește originalul doar după commit (copy-on-write), deci un
  snapshot luat sub lock rămâne consistent și după eliberarea lock-ului;
- lock-urile a două colecții nu se țin niciodată simultan.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import (
    Callable,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Type,
    TypeVar,
    Union,
)

from pydantic import BaseModel, ValidationError
from sqlalchemy import delete, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from catalog.database import build_engine, init_schema, session_scope
from catalog.errors import ConflictError, InternalError, NotFoundError, StorageError
from catalog.models.record import RecordRow

logger = logging.getLogger("catalog-api.store")

RecordT = TypeVar("RecordT", bound=BaseModel)


def next_id(ids: Iterable[int]) -> int:
    """Următorul ID liber: max(ID-uri existente, sau 0 dacă e goală) + 1."""
    latest = 0
    for value in ids:
        if value > latest:
            latest = value
    return latest + 1


class RecordStore(Generic[RecordT]):
    """Colecție ordonată (ordinea de inserare) de înregistrări cu atribut `id: int`."""

    def __init__(
        self,
        name: str,
        record_type: Type[RecordT],
        engine: Engine,
        records: Sequence[RecordT] = (),
        *,
        path: Optional[Path] = None,
    ):
        self.name = name
        self.record_type = record_type
        self.path = path
        self._engine = engine
        self._records: List[RecordT] = list(records)
        self._index: Dict[int, int] = {r.id: pos for pos, r in enumerate(self._records)}
        self._lock = threading.Lock()

    # -------------------------- Load --------------------------

    @classmethod
    def load_or_init(
        cls,
        path: Union[str, Path],
        record_type: Type[RecordT],
        *,
        name: Optional[str] = None,
        echo: Optional[bool] = None,
    ) -> "RecordStore[RecordT]":
        """
        Încarcă colecția persistată sau pornește cu una goală.
        Ridică StorageError dacă fișierul există dar nu poate fi citit / e corupt.
        """
        path = Path(path)
        name = name or path.stem
        if path.exists() and not path.is_file():
            raise StorageError(f"{name} store path is not a file: {path}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create directory for {name} store: {e}") from e

        engine = build_engine(path, echo=echo)
        try:
            init_schema(engine)
            with session_scope(engine) as db:
                rows = db.execute(
                    select(RecordRow.record_id, RecordRow.payload).order_by(RecordRow.seq.asc())
                ).all()
        except (SQLAlchemyError, sqlite3.Error) as e:
            engine.dispose()
            raise StorageError(f"Cannot load {name} store from {path}: {e}") from e

        records: List[RecordT] = []
        seen: set[int] = set()
        try:
            for record_id, payload in rows:
                rec = record_type.model_validate_json(payload)
                if rec.id != record_id or rec.id in seen:
                    raise StorageError(f"{name} store is corrupt: inconsistent id {record_id}")
                seen.add(rec.id)
                records.append(rec)
        except ValidationError as e:
            engine.dispose()
            raise StorageError(f"{name} store is corrupt: {e}") from e
        except StorageError:
            engine.dispose()
            raise

        logger.info("Loaded %s store: %d records from %s", name, len(records), path)
        return cls(name, record_type, engine, records, path=path)

    def close(self) -> None:
        self._engine.dispose()

    # -------------------------- Reads --------------------------

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def ids(self) -> List[int]:
        with self._lock:
            return [r.id for r in self._records]

    def next_id(self) -> int:
        with self._lock:
            return next_id(self._index)

    def find(self, record_id: int) -> RecordT:
        """Copie detașată a înregistrării; NotFoundError dacă lipsește."""
        with self._lock:
            return self._records[self._position(record_id)].model_copy(deep=True)

    def iterate(self) -> Iterator[RecordT]:
        """
        Generator leneș în ordinea de inserare. Snapshot-ul se ia la primul next();
        pentru o nouă parcurgere se apelează din nou iterate().
        """
        with self._lock:
            snapshot = list(self._records)
        for rec in snapshot:
            yield rec.model_copy(deep=True)

    # -------------------------- Mutations --------------------------

    def insert(self, record: RecordT) -> RecordT:
        """Adaugă la final; ConflictError pe ID duplicat. Persistat la return."""
        with self._lock:
            return self._insert_locked(record.model_copy(deep=True))

    def insert_new(self, build: Callable[[int], RecordT]) -> RecordT:
        """Alocă următorul ID și inserează `build(id)` sub același lock (atomic)."""
        with self._lock:
            new_id = next_id(self._index)
            record = build(new_id)
            if record.id != new_id:
                raise InternalError(
                    f"{self.name}: allocated id {new_id} but record carries id {record.id}"
                )
            return self._insert_locked(record)

    @contextmanager
    def find_mut(self, record_id: int) -> Iterator[RecordT]:
        """
        Draft mutabil; se persistă la ieșirea normală din bloc, se aruncă la excepție.
        Lock-ul rămâne ținut pe toată durata blocului `with`.
        """
        with self._lock:
            pos = self._position(record_id)
            draft = self._records[pos].model_copy(deep=True)
            yield draft
            self._commit_locked({pos: draft})

    def update_where(
        self,
        predicate: Callable[[RecordT], bool],
        mutate: Callable[[RecordT], None],
    ) -> List[RecordT]:
        """
        Aplică `mutate` pe câte un draft pentru fiecare înregistrare care satisface
        `predicate` și le persistă într-o singură tranzacție (totul sau nimic).
        `predicate` primește înregistrarea stocată și nu trebuie să o modifice.
        """
        with self._lock:
            drafts: Dict[int, RecordT] = {}
            for pos, rec in enumerate(self._records):
                if predicate(rec):
                    draft = rec.model_copy(deep=True)
                    mutate(draft)
                    drafts[pos] = draft
            if drafts:
                self._commit_locked(drafts)
            return [d.model_copy(deep=True) for d in drafts.values()]

    def replace(self, record: RecordT) -> RecordT:
        """Suprascrie o înregistrare existentă (aceeași identitate)."""
        with self._lock:
            pos = self._position(record.id)
            self._commit_locked({pos: record.model_copy(deep=True)})
            return record

    def discard(self, record_id: int) -> None:
        """
        Retrage o înregistrare; folosit doar ca pas compensator când o operație
        compusă eșuează după insert. NotFoundError dacă lipsește.
        """
        with self._lock:
            pos = self._position(record_id)
            self._write(deletes=[record_id])
            del self._records[pos]
            self._index = {r.id: i for i, r in enumerate(self._records)}
            logger.info("%s: discarded id=%s", self.name, record_id)

    # -------------------------- Internals (lock ținut) --------------------------

    def _position(self, record_id: int) -> int:
        try:
            return self._index[record_id]
        except KeyError:
            raise NotFoundError(f"{self.name}: id {record_id} not found") from None

    def _insert_locked(self, record: RecordT) -> RecordT:
        if record.id in self._index:
            raise ConflictError(f"{self.name}: id {record.id} already exists")
        self._write(inserts=[record])
        self._index[record.id] = len(self._records)
        self._records.append(record)
        logger.debug("%s: inserted id=%s", self.name, record.id)
        return record.model_copy(deep=True)

    def _commit_locked(self, drafts: Dict[int, RecordT]) -> None:
        for pos, draft in drafts.items():
            if draft.id != self._records[pos].id:
                raise InternalError(f"{self.name}: record identity cannot change")
        self._write(updates=list(drafts.values()))
        # apelantul poate păstra referința la draft; stocăm o copie
        for pos, draft in drafts.items():
            self._records[pos] = draft.model_copy(deep=True)

    def _write(
        self,
        *,
        inserts: Sequence[RecordT] = (),
        updates: Sequence[RecordT] = (),
        deletes: Sequence[int] = (),
    ) -> None:
        try:
            with session_scope(self._engine) as db:
                for rec in inserts:
                    db.add(RecordRow(record_id=rec.id, payload=rec.model_dump_json()))
                for rec in updates:
                    res = db.execute(
                        update(RecordRow)
                        .where(RecordRow.record_id == rec.id)
                        .values(payload=rec.model_dump_json())
                    )
                    if res.rowcount != 1:
                        raise StorageError(f"{self.name}: row for id {rec.id} missing on disk")
                for record_id in deletes:
                    db.execute(delete(RecordRow).where(RecordRow.record_id == record_id))
        except SQLAlchemyError as e:
            logger.error("%s: write failed: %s", self.name, e)
            raise StorageError(f"{self.name}: write failed: {e}") from e


__all__ = ["RecordStore", "next_id"]
