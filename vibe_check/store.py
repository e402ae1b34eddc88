"""Result stores that persist finished analyses by identifier."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from pydantic import ValidationError as SchemaError
from supabase import create_client

from .config import Settings
from .errors import ResultNotFoundError, StorageError
from .schemas import AnalysisRecord

logger = logging.getLogger(__name__)


class ResultStore(ABC):
    """Persist and retrieve :class:`AnalysisRecord` objects."""

    name: str = "abstract"

    @abstractmethod
    def put(self, record: AnalysisRecord) -> None:
        """Persist *record*; raise :class:`StorageError` on failure."""

    @abstractmethod
    def get(self, result_id: str) -> AnalysisRecord:
        """Return the record for *result_id* or raise :class:`ResultNotFoundError`."""


class InMemoryResultStore(ResultStore):
    """Keep records in process memory for the lifetime of the server.

    Nothing is ever evicted. Each write uses a freshly generated identifier,
    so concurrent requests never contend for a key.
    """

    name = "memory"

    def __init__(self) -> None:
        self._records: Dict[str, AnalysisRecord] = {}

    def put(self, record: AnalysisRecord) -> None:
        self._records[record.id] = record

    def get(self, result_id: str) -> AnalysisRecord:
        record = self._records.get(result_id)
        if record is None:
            raise ResultNotFoundError(result_id)
        return record

    def __len__(self) -> int:
        return len(self._records)


class SupabaseResultStore(ResultStore):
    """Store records as rows of a Supabase (PostgREST) table."""

    name = "supabase"

    def __init__(self, client: Any, table: str) -> None:
        self._client = client
        self._table = table

    def put(self, record: AnalysisRecord) -> None:
        try:
            self._client.table(self._table).insert(record.to_row()).execute()
        except Exception as exc:  # supabase surfaces several unrelated error types
            raise StorageError(f"Could not save result {record.id}: {exc}") from exc

    def get(self, result_id: str) -> AnalysisRecord:
        try:
            response = (
                self._client.table(self._table)
                .select("*")
                .eq("id", result_id)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise StorageError(f"Could not load result {result_id}: {exc}") from exc

        rows = response.data or []
        if not rows:
            raise ResultNotFoundError(result_id)
        return _record_from_row(rows[0])


def _record_from_row(row: Dict[str, Any]) -> AnalysisRecord:
    try:
        return AnalysisRecord.model_validate(row)
    except SchemaError as exc:
        raise StorageError(f"Stored result {row.get('id')} is malformed") from exc


def build_store(settings: Settings) -> ResultStore:
    """Pick the backend once at startup based on configuration."""

    if settings.durable_storage_enabled:
        client = create_client(settings.supabase_url, settings.supabase_key)
        logger.info("Persisting results to Supabase table %r", settings.supabase_table)
        return SupabaseResultStore(client, settings.supabase_table)

    logger.warning("SUPABASE_URL/SUPABASE_KEY not set; results are kept in memory only")
    return InMemoryResultStore()
