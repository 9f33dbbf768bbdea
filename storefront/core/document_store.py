"""
Async document store backed by Redis hashes.

Each document lives in one hash keyed ``<prefix>:doc:<collection>:<id>``; nested
mappings are flattened into dotted field names (``eventCounts.hover_2s``) and
every leaf value is JSON encoded. Dots and tildes inside a key are escaped as
``~1`` and ``~0`` so free-form mappings such as event metadata keep their keys
(``{"utm.source": "mail"}`` is stored under ``metadata.utm~1source``).

A set ``<prefix>:idx:<collection>`` tracks the ids of a collection so it can be
listed and queried.

Storing numbers as plain JSON keeps them valid operands for HINCRBY and
HINCRBYFLOAT, which is what makes ``Increment`` atomic: counters are bumped by
the server, never read and written back by the client.

Usage:
    store = DocumentStore(redis_client, prefix="storefront")
    await store.update(
        "productScores", "42",
        {"rawScore": Increment(15), "lastUpdated": ServerTimestamp()},
        create=True,
    )
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from redis.asyncio import Redis

from storefront.core.exceptions import DocumentNotFoundError

logger = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class Increment:
    """Field value that adds ``amount`` to the stored number atomically."""
    amount: Number = 1


@dataclass(frozen=True)
class ServerTimestamp:
    """Field value replaced by the store's clock at write time."""


class Snapshot(NamedTuple):
    """A document together with its store id."""
    id: str
    data: Dict[str, Any]


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def escape_key(name: Any) -> str:
    return str(name).replace("~", "~0").replace(".", "~1")


def unescape_key(segment: str) -> str:
    return segment.replace("~1", ".").replace("~0", "~")


def flatten(document: Dict[str, Any], parent: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into dotted field names, escaping dots in keys."""
    flat: Dict[str, Any] = {}
    for name, value in document.items():
        segment = escape_key(name)
        path = f"{parent}.{segment}" if parent else segment
        if isinstance(value, dict) and value:
            flat.update(flatten(value, path))
        else:
            flat[path] = value
    return flat


def unflatten(flat: Dict[str, Any]) -> Dict[str, Any]:
    """Inverse of :func:`flatten`."""
    document: Dict[str, Any] = {}
    for path, value in flat.items():
        node = document
        *parents, leaf = [unescape_key(segment) for segment in path.split(".")]
        for name in parents:
            child = node.setdefault(name, {})
            if not isinstance(child, dict):
                # A leaf and a nested field share a name; keep the leaf
                logger.warning("Dropping field %s: %s is not a mapping", path, name)
                break
            node = child
        else:
            node[leaf] = value
    return document


def sort_key(value: Any) -> tuple:
    """Total order over mixed JSON values: numbers, then strings, then the rest."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value, "")
    if isinstance(value, str):
        return (1, 0, value)
    return (2, 0, json.dumps(value, sort_keys=True, default=str))


def lookup(document: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted field path, returning None when any segment is missing."""
    node: Any = document
    for name in path.split("."):
        if not isinstance(node, dict) or name not in node:
            return None
        node = node[name]
    return node


class DocumentStore:
    """
    Collection/document API over a Redis connection.

    All methods are coroutines; a Redis failure surfaces as the redis-py
    exception so each caller can apply its own error policy.
    """

    def __init__(self, client: Redis, prefix: str = "storefront"):
        self.client = client
        self.prefix = prefix

    # ── Keys & encoding ──────────────────────────────────────────────────────

    def _doc_key(self, collection: str, doc_id: str) -> str:
        return f"{self.prefix}:doc:{collection}:{doc_id}"

    def _index_key(self, collection: str) -> str:
        return f"{self.prefix}:idx:{collection}"

    @staticmethod
    def _encode(flat: Dict[str, Any]) -> Dict[str, str]:
        return {name: json.dumps(value, default=_json_default) for name, value in flat.items()}

    @staticmethod
    def _decode(raw: Dict[str, str]) -> Dict[str, Any]:
        return unflatten({name: json.loads(value) for name, value in raw.items()})

    async def server_time(self) -> datetime:
        seconds, microseconds = await self.client.time()
        return datetime.fromtimestamp(seconds + microseconds / 1_000_000, tz=timezone.utc)

    async def _resolve_timestamps(self, flat: Dict[str, Any]) -> Dict[str, Any]:
        if not any(isinstance(value, ServerTimestamp) for value in flat.values()):
            return flat
        now = await self.server_time()
        return {
            name: now if isinstance(value, ServerTimestamp) else value
            for name, value in flat.items()
        }

    # ── Reads ────────────────────────────────────────────────────────────────

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        raw = await self.client.hgetall(self._doc_key(collection, str(doc_id)))
        if not raw:
            return None
        return self._decode(raw)

    async def query_all(
        self,
        collection: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Snapshot]:
        """
        Return every document in a collection.

        Documents missing the ``order_by`` field sort last in either direction.
        Values of different JSON types never raise: numbers sort before
        strings, strings before everything else.
        """
        ids = sorted(await self.client.smembers(self._index_key(collection)))
        if not ids:
            return []

        async with self.client.pipeline(transaction=False) as pipe:
            for doc_id in ids:
                pipe.hgetall(self._doc_key(collection, doc_id))
            rows = await pipe.execute()

        snapshots = [
            Snapshot(doc_id, self._decode(raw))
            for doc_id, raw in zip(ids, rows)
            if raw
        ]
        if order_by is None:
            return snapshots

        present = [s for s in snapshots if lookup(s.data, order_by) is not None]
        missing = [s for s in snapshots if lookup(s.data, order_by) is None]
        present.sort(key=lambda s: sort_key(lookup(s.data, order_by)), reverse=descending)
        return present + missing

    async def query(self, collection: str, field: str, value: Any) -> List[Snapshot]:
        """Return documents whose ``field`` (dotted path allowed) equals ``value``."""
        return [
            snapshot
            for snapshot in await self.query_all(collection)
            if lookup(snapshot.data, field) == value
        ]

    # ── Writes ───────────────────────────────────────────────────────────────

    async def set(self, collection: str, doc_id: str, document: Dict[str, Any]) -> None:
        """Create or fully overwrite a document."""
        doc_id = str(doc_id)
        flat = await self._resolve_timestamps(flatten(document))
        key = self._doc_key(collection, doc_id)
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.delete(key)
            if flat:
                pipe.hset(key, mapping=self._encode(flat))
            pipe.sadd(self._index_key(collection), doc_id)
            await pipe.execute()

    async def add(self, collection: str, document: Dict[str, Any]) -> str:
        """Insert a document under a generated id and return the id."""
        doc_id = uuid.uuid4().hex[:20]
        await self.set(collection, doc_id, document)
        return doc_id

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any],
        create: bool = False,
    ) -> Dict[str, Any]:
        """
        Merge ``fields`` into a document in a single MULTI/EXEC.

        ``Increment`` values are applied with HINCRBY/HINCRBYFLOAT and
        ``ServerTimestamp`` values are resolved from the Redis clock. With
        ``create=True`` a missing document is created (increments start from 0);
        otherwise a missing document raises DocumentNotFoundError.

        Returns:
            The post-increment values of every incremented field, nested the
            same way as ``fields``.
        """
        doc_id = str(doc_id)
        key = self._doc_key(collection, doc_id)
        flat = await self._resolve_timestamps(flatten(fields))
        increments = {n: v.amount for n, v in flat.items() if isinstance(v, Increment)}
        plain = {n: v for n, v in flat.items() if not isinstance(v, Increment)}

        def _queue(pipe) -> None:
            for name, amount in increments.items():
                if isinstance(amount, int):
                    pipe.hincrby(key, name, amount)
                else:
                    pipe.hincrbyfloat(key, name, amount)
            if plain:
                pipe.hset(key, mapping=self._encode(plain))
            pipe.sadd(self._index_key(collection), doc_id)

        if create:
            async with self.client.pipeline(transaction=True) as pipe:
                _queue(pipe)
                results = await pipe.execute()
        else:
            async def _guarded(pipe) -> None:
                if not await pipe.exists(key):
                    raise DocumentNotFoundError(collection, doc_id)
                pipe.multi()
                _queue(pipe)

            results = await self.client.transaction(_guarded, key)

        return unflatten({
            name: json.loads(str(result)) if not isinstance(result, (int, float)) else result
            for name, result in zip(increments, results)
        })

    async def transaction(
        self,
        collection: str,
        doc_id: str,
        fn: Callable[[Dict[str, Any]], Optional[Dict[str, Any]]],
    ) -> Optional[Dict[str, Any]]:
        """
        Optimistic read-modify-write of one document.

        ``fn`` receives the current document and returns the fields to merge
        (or None to leave it untouched). The document is WATCHed, so a
        concurrent write makes Redis reject the EXEC and ``fn`` runs again on
        the fresh document. Returns the resulting document, or None if it does
        not exist.
        """
        doc_id = str(doc_id)
        key = self._doc_key(collection, doc_id)

        async def _apply(pipe) -> Optional[Dict[str, Any]]:
            raw = await pipe.hgetall(key)
            if not raw:
                return None
            current = self._decode(raw)
            changes = fn(current)
            if not changes:
                return current
            flat = await self._resolve_timestamps(flatten(changes))
            encoded = self._encode(flat)
            pipe.multi()
            pipe.hset(key, mapping=encoded)
            return self._decode({**raw, **encoded})

        return await self.client.transaction(_apply, key, value_from_callable=True)

    async def delete(self, collection: str, doc_id: str) -> bool:
        doc_id = str(doc_id)
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.delete(self._doc_key(collection, doc_id))
            pipe.srem(self._index_key(collection), doc_id)
            deleted, _ = await pipe.execute()
        return deleted > 0
