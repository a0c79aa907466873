"""Application services orchestrating the statement ingestion workflow."""
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from threading import Event
from typing import Sequence

from statement_ingest.application.dto import (
    ProcessFileRequest,
    ProcessFileResponse,
    ProcessingSummary,
)
from statement_ingest.config import SETTINGS, Settings
from statement_ingest.domain.data_point import DataPoint
from statement_ingest.domain.models import FileMetadata
from statement_ingest.domain.repositories import DataPointRepository
from statement_ingest.domain.results import ParsingOutcome
from statement_ingest.infrastructure.parsing.dispatcher import BrokerDispatcher
from statement_ingest.logging_setup import get_logger

logger = get_logger(__name__)

DUPLICATE_STATUS = "Duplicate"
REJECTED_STATUS = "Rejected"


def validate_request(request: ProcessFileRequest, settings: Settings = SETTINGS) -> list[str]:
    """Check upload constraints; an empty list means the request is acceptable."""
    errors: list[str] = []
    if request.content is None or request.size_bytes <= 0:
        errors.append("The file is required and must not be empty")
    extension = Path(request.file_name or "").suffix.lower()
    if extension not in settings.upload_extensions:
        errors.append(
            "The file must have one of the following extensions: "
            + ", ".join(settings.upload_extensions)
        )
    if request.size_bytes > settings.max_file_size_bytes:
        errors.append(
            f"The file cannot exceed {settings.max_file_size_bytes // (1024 * 1024)}MB"
        )

    broker = (request.broker_key or "").strip()
    if not broker:
        errors.append("The broker key is required")
    elif len(broker) > settings.broker_key_max_length:
        errors.append(
            f"The broker key cannot exceed {settings.broker_key_max_length} characters"
        )
    elif broker.upper() not in settings.upload_brokers:
        errors.append(
            "The broker must be one of the following: " + ", ".join(settings.upload_brokers)
        )
    return errors


@dataclass(slots=True)
class StatementProcessingContext:
    repository: DataPointRepository
    dispatcher: BrokerDispatcher
    settings: Settings = SETTINGS


class ProcessStatementUseCase:
    def __init__(self, context: StatementProcessingContext) -> None:
        self._context = context

    def execute(
        self,
        request: ProcessFileRequest,
        cancel_event: Event | None = None,
    ) -> ProcessFileResponse:
        started = time.perf_counter()
        dispatcher = self._context.dispatcher
        repository = self._context.repository

        errors = validate_request(request, self._context.settings)
        if errors:
            return self._rejected(request, started, REJECTED_STATUS, errors)

        if not dispatcher.can_handle(request.broker_key, request.file_name):
            return self._rejected(
                request,
                started,
                REJECTED_STATUS,
                [
                    f"Cannot process file '{request.file_name}' for broker '{request.broker_key}'",
                    "Supported brokers: " + ", ".join(sorted(dispatcher.supported_brokers())),
                    "Supported extensions: " + ", ".join(sorted(dispatcher.supported_extensions())),
                ],
            )

        if repository.exists_with_same_file(request.file_name, request.size_bytes):
            logger.info("Skipping already processed file %s", request.file_name)
            return self._rejected(
                request,
                started,
                DUPLICATE_STATUS,
                [
                    "This file has already been processed",
                    "Check the history of processed files",
                ],
            )

        data_point = DataPoint.create(
            FileMetadata(request.file_name, request.size_bytes, request.content_type)
        )
        repository.add(data_point)
        data_point.start_processing()
        repository.update(data_point)
        logger.info("Processing %s as data point %s", request.file_name, data_point.id)

        try:
            outcome = dispatcher.parse(
                request.content,
                request.file_name,
                request.broker_key,
                data_point.id,
                cancel_event,
            )
        except Exception as exc:
            # A stored Processing data point must always reach a terminal state.
            logger.exception("Unexpected error while parsing %s", request.file_name)
            outcome = ParsingOutcome.failure(f"Unexpected error while processing the file: {exc}")

        if outcome.is_success:
            data_point.add_movements(outcome.movements)
            data_point.mark_completed()
        else:
            data_point.mark_failed(outcome.error_message())
        repository.update(data_point)
        logger.info(
            "Data point %s finished as %s (%d movements)",
            data_point.id,
            data_point.status.value,
            len(data_point.movements),
        )

        return ProcessFileResponse(
            data_point_id=data_point.id,
            status=data_point.status.value,
            file_name=request.file_name,
            broker_key=request.broker_key,
            movement_count=len(data_point.movements),
            processing_time_ms=_elapsed_ms(started),
            processed_at=datetime.now(timezone.utc),
            errors=tuple(outcome.errors),
            warnings=tuple(outcome.warnings),
            summary=ProcessingSummary.from_movements(data_point.movements) if outcome.is_success else None,
            statistics=outcome.statistics,
            movements=data_point.movements,
        )

    @staticmethod
    def _rejected(
        request: ProcessFileRequest,
        started: float,
        status: str,
        errors: Sequence[str],
    ) -> ProcessFileResponse:
        return ProcessFileResponse(
            data_point_id=None,
            status=status,
            file_name=request.file_name,
            broker_key=request.broker_key,
            movement_count=0,
            processing_time_ms=_elapsed_ms(started),
            processed_at=datetime.now(timezone.utc),
            errors=tuple(errors),
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
