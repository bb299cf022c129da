"""
app/services/csv_upload_service.py

Service layer for the CSV validation and deduplication pipeline.

One call handles one uploaded file:

    1. parse the upload type from the file name
    2. fetch both dedup registries (concurrently, bounded by a timeout)
    3. validate every row in input order; accepted rows are enriched with
       the submitter identity
    4. stage the accepted rows, record the upload statistics, then move the
       staged file into place

Accepted rows are staged to a temp file first. The statistics row is
flushed, the staged file is moved into place and only then is the
transaction committed. Any failure rolls the transaction back and restores
whatever file the upload replaced, so an output file always has a matching
statistics row.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from functools import lru_cache

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_dedup_registry_settings, get_upload_settings
from app.connectors.dedup_registry import DedupRegistryClient
from app.domain.identity import SubmitterIdentity
from app.domain.uploads import (
    AcceptedRow,
    DedupRegistry,
    ParsedRow,
    PipelineState,
    RejectedRow,
    UploadOutcome,
    UploadType,
    parse_upload_type,
)
from app.errors import AllRowsRejectedError, CSVParseError, UploadPersistenceError
from app.repositories.upload_file_storage import FileStorageError, StagedOutput, UploadFileStorage
from app.repositories.upload_stats_repository import UploadStatsRepository
from app.services.row_enricher import RowEnricher
from app.validators.upload_row_validator import UploadRowValidator

logger = logging.getLogger(__name__)


@dataclass
class _RowPartition:
    accepted: list[AcceptedRow]
    rejected: list[RejectedRow]


class CSVUploadService:
    """
    Coordinates registry lookup, row validation, output writing and
    statistics recording for one upload.
    """

    def __init__(
        self,
        *,
        registry_client: DedupRegistryClient,
        storage: UploadFileStorage,
        validator: UploadRowValidator | None = None,
    ) -> None:
        self._registry_client = registry_client
        self._storage = storage
        self._validator = validator or UploadRowValidator()

    async def process_upload(
        self,
        *,
        file_name: str,
        content: bytes,
        identity: SubmitterIdentity,
        db: Session,
    ) -> UploadOutcome:
        """
        Run the whole pipeline for one uploaded CSV buffer.

        Args:
            file_name: Original client file name; carries the upload type.
            content:   Raw file bytes (UTF-8, optional BOM, no header row).
            identity:  Verified submitter identity from the request token.
            db:        Active SQLAlchemy session (caller owns lifecycle).

        Raises:
            InvalidUploadTypeError: file name has no known type (before any
                outbound call).
            ServiceUnavailableError: a dedup registry failed or timed out.
            CSVParseError: the buffer is not readable UTF-8 CSV.
            AllRowsRejectedError: rows were present and none was accepted.
            UploadPersistenceError: the output file or stats row could not
                be persisted.
        """

        state = PipelineState.IDLE
        try:
            upload_type = parse_upload_type(file_name)
            state = self._transition(state, PipelineState.AWAITING_REGISTRIES, file_name)
            registry = await self._registry_client.fetch_registry()

            state = self._transition(state, PipelineState.STREAMING, file_name)
            partition = await run_in_threadpool(
                self._partition_rows,
                upload_type=upload_type,
                content=content,
                identity=identity,
                registry=registry,
            )

            state = self._transition(state, PipelineState.FINALIZING, file_name)
            outcome = await run_in_threadpool(
                self._finalize,
                file_name=file_name,
                upload_type=upload_type,
                identity=identity,
                partition=partition,
                db=db,
            )
        except Exception:
            self._transition(state, PipelineState.ERRORED, file_name)
            raise

        self._transition(state, PipelineState.DONE, file_name)
        logger.info(
            "CSV upload completed file=%s type=%s accepted=%d rejected=%d",
            file_name,
            upload_type.value,
            outcome.accepted_count,
            outcome.rejected_count,
        )
        return outcome

    def _partition_rows(
        self,
        *,
        upload_type: UploadType,
        content: bytes,
        identity: SubmitterIdentity,
        registry: DedupRegistry,
    ) -> _RowPartition:
        enricher = RowEnricher(identity)
        partition = _RowPartition(accepted=[], rejected=[])

        for row in _read_rows(content, upload_type):
            decision = self._validator.validate(upload_type=upload_type, row=row, registry=registry)
            if decision.accepted:
                partition.accepted.append(enricher.enrich(row))
                continue

            reason = decision.reason or "Rejected"
            logger.debug("Row rejected row=%d reason=%s", row.row_number, reason)
            partition.rejected.append(
                RejectedRow(row_number=row.row_number, values=row.values, rejection_reason=reason)
            )
        return partition

    def _finalize(
        self,
        *,
        file_name: str,
        upload_type: UploadType,
        identity: SubmitterIdentity,
        partition: _RowPartition,
        db: Session,
    ) -> UploadOutcome:
        repository = UploadStatsRepository(db)

        if not partition.accepted and partition.rejected:
            logger.info("All rows rejected file=%s rejected=%d", file_name, len(partition.rejected))
            raise AllRowsRejectedError(partition.rejected)

        if not partition.accepted:
            logger.info("Empty upload, nothing to record file=%s", file_name)
            return UploadOutcome(
                file_name=file_name,
                upload_type=upload_type,
                accepted_count=0,
                rejected_rows=[],
                stats=repository.user_stats(identity.provider_id),
            )

        try:
            staged = self._storage.stage_rows(upload_type, file_name, partition.accepted)
        except FileStorageError as exc:
            logger.error("Upload output write failed file=%s error=%s", file_name, exc)
            raise UploadPersistenceError("Failed to write accepted rows.") from exc

        try:
            repository.record(
                username=identity.provider_id,
                user_base_entity_id=identity.user_base_entity_id,
                uploaded_file=file_name,
                uploaded_file_type=upload_type.value,
                imported_rows=len(partition.accepted),
                rejected_rows=len(partition.rejected),
            )
            output_path = self._storage.promote(staged)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Upload stats insert failed file=%s error=%s", file_name, exc)
            self._discard_output(staged)
            raise UploadPersistenceError("Failed to record upload statistics.") from exc
        except FileStorageError as exc:
            db.rollback()
            logger.error("Upload output move failed file=%s error=%s", file_name, exc)
            self._discard_output(staged)
            raise UploadPersistenceError("Failed to write accepted rows.") from exc

        self._storage.finish(staged)
        return UploadOutcome(
            file_name=file_name,
            upload_type=upload_type,
            accepted_count=len(partition.accepted),
            rejected_rows=partition.rejected,
            stats=repository.user_stats(identity.provider_id),
            output_path=str(output_path),
        )

    def _discard_output(self, staged: StagedOutput) -> None:
        try:
            self._storage.discard(staged)
        except FileStorageError:
            logger.exception("Could not restore output after failed upload path=%s", staged.target)

    @staticmethod
    def _transition(current: PipelineState, target: PipelineState, file_name: str) -> PipelineState:
        logger.info("CSV upload state %s -> %s file=%s", current.value, target.value, file_name)
        return target


def _read_rows(content: bytes, upload_type: UploadType) -> list[ParsedRow]:
    """
    Decode the buffer and map every non-blank record to a ParsedRow.

    Row numbers are 1-based record positions in the file.
    """

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise CSVParseError("CSV must be UTF-8 encoded.") from exc

    rows: list[ParsedRow] = []
    try:
        reader = csv.reader(io.StringIO(text, newline=""))
        for row_number, values in enumerate(reader, start=1):
            if not values or all(not value.strip() for value in values):
                continue
            rows.append(ParsedRow.from_values(row_number=row_number, values=values, upload_type=upload_type))
    except csv.Error as exc:
        raise CSVParseError(f"Invalid CSV format: {exc}") from exc
    return rows


@lru_cache(maxsize=1)
def get_csv_upload_service() -> CSVUploadService:
    """
    Return cached CSV upload service configured from environment settings.
    """

    return CSVUploadService(
        registry_client=DedupRegistryClient(settings=get_dedup_registry_settings()),
        storage=UploadFileStorage(get_upload_settings().output_root),
    )
