# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-17
# Description: ChromaRecordStore
# -----------------------------------------------------------------------------
import logging
from typing import Any, Dict, List, Optional, Sequence

import chromadb
from chromadb import ClientAPI
from chromadb.api.models.Collection import Collection
from chromadb.errors import InvalidArgumentError

from config.Config import Config
from errors.Faults import StoreUnavailableError
from record.Record import Record
from utility.logging_utils import get_class_logger
from vectorstore.RecordStore import RecordPage, SearchHit, VectorUpdate
from vectorstore.slicing import BUCKET_COUNT, BUCKET_FIELD, bucket_of, buckets_for_slice, check_slice

VERSION_FIELD = "pipeline_version"
RESERVED_FIELDS = (BUCKET_FIELD, VERSION_FIELD)

METRIC_TO_SPACE = {"cosine": "cosine", "dot": "ip", "l2": "l2"}

# Chroma keeps exactly one embedding per row, so source records live in a
# catalog collection with this constant placeholder and every output field
# gets its own collection "<collection>__<field>" keyed by the same ids.
CATALOG_PLACEHOLDER = [0.0]


class ChromaRecordStore:
    """RecordStore adapter for Chroma (cloud, http or local persistent client)."""

    def __init__(
            self,
            *,
            client: ClientAPI | None = None,
            cfg: Config | None = None,
            logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or get_class_logger(self.__class__)
        if client is None:
            if cfg is None:
                raise ValueError("ChromaRecordStore needs either a client or a Config")
            client = self.build_client(cfg)
        self.client: ClientAPI = client
        self._collections: Dict[str, Collection] = {}

    @staticmethod
    def build_client(cfg: Config) -> ClientAPI:
        if cfg.chroma_mode == "cloud":
            return chromadb.CloudClient(
                tenant=cfg.chroma_tenant,
                database=cfg.chroma_database,
                api_key=cfg.chroma_api_key,
            )
        if cfg.chroma_mode == "http":
            host, _, port = cfg.chroma_endpoint.replace("http://", "").replace("https://", "").partition(":")
            return chromadb.HttpClient(
                host=host,
                port=int(port or 8000),
                ssl=cfg.chroma_endpoint.startswith("https://"),
            )
        return chromadb.PersistentClient(path=cfg.chroma_path or "./chroma")

    def test_connection(self) -> bool:
        try:
            self.client.heartbeat()
            return True
        except Exception as e:
            self.logger.error("Chroma connection failed: %s", e)
            return False

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------
    def ensure_vector_field(
            self,
            collection: str,
            output_field: str,
            dimension: int,
            metric: str = "cosine",
            index_options: Dict[str, Any] | None = None,
    ) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be > 0")
        metric = (metric or "cosine").lower()
        if metric not in METRIC_TO_SPACE:
            raise ValueError(f"Unsupported metric: {metric}. Supported: {sorted(METRIC_TO_SPACE)}")

        existing = self.vector_field_dimension(collection, output_field)
        if existing is not None:
            if existing != dimension:
                raise ValueError(
                    f"Vector field '{output_field}' already declared with dimension {existing}, got {dimension}"
                )
            return

        metadata: Dict[str, Any] = {
            "rvi:dimension": dimension,
            "rvi:metric": metric,
            "hnsw:space": METRIC_TO_SPACE[metric],
        }
        # Graph parameters are opaque passthrough
        metadata.update({k: v for k, v in (index_options or {}).items() if k.startswith("hnsw:") and k != "hnsw:space"})

        name = self._field_collection_name(collection, output_field)
        self._call(
            f"create collection '{name}'",
            lambda: self.client.get_or_create_collection(name=name, metadata=metadata, embedding_function=None),
        )
        self._catalog(collection)
        self.logger.info(
            "Chroma vector field ready: '%s' (dim=%d, metric=%s)", name, dimension, metric
        )

    def vector_field_dimension(self, collection: str, output_field: str) -> Optional[int]:
        col = self._vector_collection(collection, output_field)
        if col is None:
            return None
        dim = (col.metadata or {}).get("rvi:dimension")
        return int(dim) if dim is not None else None

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------
    def upsert_records(self, collection: str, records: Sequence[Record]) -> None:
        if not records:
            return
        catalog = self._catalog(collection)

        metas = [self._to_metadata(r.id, r.attributes) for r in records]
        self._call(
            f"upsert {len(records)} record(s) into '{collection}'",
            lambda: catalog.upsert(
                ids=[r.id for r in records],
                embeddings=[CATALOG_PLACEHOLDER for _ in records],
                metadatas=metas,
            ),
        )

        by_field: Dict[str, List[VectorUpdate]] = {}
        for r in records:
            for output_field, vector in r.vectors.items():
                by_field.setdefault(output_field, []).append(
                    VectorUpdate(record_id=r.id, vector=vector, pipeline_version=r.pipeline_versions.get(output_field, 0))
                )
        for output_field, updates in by_field.items():
            self._write_vectors(collection, output_field, updates, dict(zip([r.id for r in records], metas)))

        self.logger.info("Upserted %d record(s) into Chroma collection '%s'", len(records), collection)

    def get_records(self, collection: str, ids: Sequence[str]) -> List[Record]:
        if not ids:
            return []
        catalog = self._catalog(collection)
        res = self._call(
            f"get {len(ids)} record(s) from '{collection}'",
            lambda: catalog.get(ids=list(ids), include=["metadatas"]),
        )
        by_id = {rid: self._from_metadata(rid, md) for rid, md in zip(res.get("ids") or [], res.get("metadatas") or [])}
        self._attach_vectors(collection, by_id)
        return [by_id[i] for i in ids if i in by_id]

    def read_batch(
            self,
            collection: str,
            *,
            filters: Dict[str, Any] | None = None,
            slice_id: int = 0,
            slice_count: int = 1,
            cursor: Optional[str] = None,
            limit: int = 1000,
    ) -> RecordPage:
        check_slice(slice_id, slice_count)
        if limit < 1:
            raise ValueError("limit must be >= 1")

        conditions = self._filter_conditions(filters)
        if slice_count > 1:
            conditions.append({BUCKET_FIELD: {"$in": buckets_for_slice(slice_id, slice_count)}})
        where = self._where(conditions)

        # Cursor is the offset within this slice's stable result order
        offset = int(cursor) if cursor else 0
        catalog = self._catalog(collection)
        res = self._call(
            f"read '{collection}' slice {slice_id}/{slice_count} @ {offset}",
            lambda: catalog.get(where=where, limit=limit, offset=offset, include=["metadatas"]),
        )

        ids = res.get("ids") or []
        metas = res.get("metadatas") or []
        by_id = {rid: self._from_metadata(rid, md) for rid, md in zip(ids, metas)}
        self._attach_vectors(collection, by_id)

        next_cursor = str(offset + len(ids)) if len(ids) == limit else None
        return RecordPage(records=[by_id[i] for i in ids], next_cursor=next_cursor)

    def update_vectors(self, collection: str, output_field: str, updates: Sequence[VectorUpdate]) -> int:
        if not updates:
            return 0
        catalog = self._catalog(collection)
        ids = [u.record_id for u in updates]
        res = self._call(
            f"get catalog rows for {len(ids)} update(s)",
            lambda: catalog.get(ids=ids, include=["metadatas"]),
        )
        catalog_meta = dict(zip(res.get("ids") or [], res.get("metadatas") or []))

        present = [u for u in updates if u.record_id in catalog_meta]
        self._write_vectors(collection, output_field, present, catalog_meta)
        return len(present)

    def knn_search(
            self,
            collection: str,
            output_field: str,
            vector: Sequence[float],
            *,
            k: int,
            num_candidates: int,
            filters: Dict[str, Any] | None = None,
            fields: Optional[List[str]] = None,
    ) -> List[SearchHit]:
        if k <= 0:
            return []
        col = self._vector_collection(collection, output_field)
        if col is None:
            raise KeyError(f"Vector field does not exist: {collection}.{output_field}")
        metric = (col.metadata or {}).get("rvi:metric", "cosine")

        query_kwargs: Dict[str, Any] = {
            "query_embeddings": [[float(v) for v in vector]],
            "n_results": max(num_candidates, k),
            "include": ["metadatas", "distances"],
        }
        where = self._where(self._filter_conditions(filters))
        if where is not None:
            query_kwargs["where"] = where

        self.logger.debug("Chroma kNN on '%s' (k=%d, candidates=%d, where=%s)", col.name, k, num_candidates, where)
        res = self._call(f"kNN query on '{col.name}'", lambda: col.query(**query_kwargs))

        ids0 = (res.get("ids") or [[]])[0]
        metas0 = (res.get("metadatas") or [[]])[0] or [None] * len(ids0)
        dists0 = (res.get("distances") or [[]])[0] or [None] * len(ids0)

        hits: List[SearchHit] = []
        for rid, md, dist in zip(ids0, metas0, dists0):
            attributes = self._from_metadata(rid, md).project(fields)
            hits.append(SearchHit(record_id=rid, score=self._score(metric, dist), attributes=attributes))

        hits.sort(key=lambda h: (-h.score, h.record_id))
        return hits[:k]

    def count(self, collection: str, filters: Dict[str, Any] | None = None) -> int:
        catalog = self._catalog(collection)
        where = self._where(self._filter_conditions(filters))
        if where is None:
            return int(self._call(f"count '{collection}'", catalog.count))
        res = self._call(f"count '{collection}'", lambda: catalog.get(where=where, include=[]))
        return len(res.get("ids") or [])

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _write_vectors(
            self,
            collection: str,
            output_field: str,
            updates: Sequence[VectorUpdate],
            catalog_meta: Dict[str, Any],
    ) -> None:
        if not updates:
            return
        col = self._vector_collection(collection, output_field)
        if col is None:
            raise KeyError(f"Vector field is not declared: {collection}.{output_field}")
        dim = int((col.metadata or {}).get("rvi:dimension", 0))
        for u in updates:
            if dim and len(u.vector) != dim:
                raise ValueError(
                    f"Vector dimension mismatch for '{output_field}': expected {dim}, got {len(u.vector)}"
                )

        # Vector rows carry a copy of the source attributes so kNN filters work natively
        metadatas = []
        for u in updates:
            md = dict(catalog_meta.get(u.record_id) or {})
            md[VERSION_FIELD] = int(u.pipeline_version)
            metadatas.append(md)

        self._call(
            f"write {len(updates)} vector(s) to '{col.name}'",
            lambda: col.upsert(
                ids=[u.record_id for u in updates],
                embeddings=[[float(v) for v in u.vector] for u in updates],
                metadatas=metadatas,
            ),
        )

    def _attach_vectors(self, collection: str, by_id: Dict[str, Record]) -> None:
        if not by_id:
            return
        prefix = f"{collection}__"
        for name in self._field_collection_names(collection):
            output_field = name[len(prefix):]
            col = self._vector_collection(collection, output_field)
            if col is None:
                continue
            res = self._call(
                f"get vectors from '{name}'",
                lambda: col.get(ids=list(by_id), include=["embeddings", "metadatas"]),
            )
            embeddings = res.get("embeddings")
            if embeddings is None:
                embeddings = []
            for rid, emb, md in zip(res.get("ids") or [], embeddings, res.get("metadatas") or []):
                rec = by_id.get(rid)
                if rec is None or emb is None:
                    continue
                rec.vectors[output_field] = [float(v) for v in emb]
                rec.pipeline_versions[output_field] = int((md or {}).get(VERSION_FIELD, 0))

    def _field_collection_names(self, collection: str) -> List[str]:
        prefix = f"{collection}__"
        listed = self._call("list collections", self.client.list_collections)
        names = [c if isinstance(c, str) else c.name for c in listed]
        return sorted(n for n in names if n.startswith(prefix))

    def _catalog(self, collection: str) -> Collection:
        col = self._collections.get(collection)
        if col is None:
            col = self._call(
                f"open catalog '{collection}'",
                lambda: self.client.get_or_create_collection(
                    name=collection,
                    metadata={"rvi:role": "catalog", "hnsw:space": "l2"},
                    embedding_function=None,
                ),
            )
            self._collections[collection] = col
        return col

    def _vector_collection(self, collection: str, output_field: str) -> Optional[Collection]:
        name = self._field_collection_name(collection, output_field)
        col = self._collections.get(name)
        if col is not None:
            return col
        if name not in self._field_collection_names(collection):
            return None
        col = self._call(
            f"open vector field '{name}'",
            lambda: self.client.get_collection(name=name, embedding_function=None),
        )
        self._collections[name] = col
        return col

    @staticmethod
    def _field_collection_name(collection: str, output_field: str) -> str:
        return f"{collection}__{output_field}"

    @staticmethod
    def _to_metadata(record_id: str, attributes: Dict[str, Any]) -> Dict[str, Any]:
        md: Dict[str, Any] = {}
        for key, value in attributes.items():
            if key in RESERVED_FIELDS:
                raise ValueError(f"attribute name '{key}' is reserved")
            if value is None:
                continue
            md[key] = value if isinstance(value, (str, int, float, bool)) else str(value)
        md[BUCKET_FIELD] = bucket_of(record_id)
        return md

    @staticmethod
    def _from_metadata(record_id: str, md: Optional[Dict[str, Any]]) -> Record:
        attributes = {k: v for k, v in (md or {}).items() if k not in RESERVED_FIELDS}
        return Record(id=record_id, attributes=attributes)

    @staticmethod
    def _filter_conditions(filters: Dict[str, Any] | None) -> List[Dict[str, Any]]:
        return [{key: {"$eq": value}} for key, value in (filters or {}).items()]

    @staticmethod
    def _where(conditions: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if not conditions:
            return None
        if len(conditions) == 1:
            return conditions[0]
        return {"$and": conditions}

    @staticmethod
    def _score(metric: str, distance: Optional[float]) -> float:
        if distance is None:
            return 0.0
        # Chroma reports distances; cosine and ip distances are 1 - similarity
        if metric == "l2":
            return -float(distance)
        return 1.0 - float(distance)

    def _call(self, description: str, fn):
        try:
            return fn()
        except (KeyError, ValueError):
            raise
        except InvalidArgumentError as e:
            raise ValueError(f"Chroma {description} rejected: {e}") from e
        except Exception as e:
            self.logger.error("Chroma %s failed: %s", description, e)
            raise StoreUnavailableError(f"Chroma {description} failed: {e}") from e
