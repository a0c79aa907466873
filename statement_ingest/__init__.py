"""Broker account statement ingestion toolkit."""
from statement_ingest.application.use_cases import ProcessStatementUseCase, StatementProcessingContext
from statement_ingest.domain.data_point import DataPoint, DataPointStatus
from statement_ingest.domain.models import Movement, MovementCategory
from statement_ingest.domain.results import ParsingOutcome
from statement_ingest.infrastructure.parsing.dispatcher import BrokerDispatcher, default_dispatcher
from statement_ingest.infrastructure.parsing.iol import IolStatementParser

__all__ = [
    "ProcessStatementUseCase",
    "StatementProcessingContext",
    "DataPoint",
    "DataPointStatus",
    "Movement",
    "MovementCategory",
    "ParsingOutcome",
    "BrokerDispatcher",
    "default_dispatcher",
    "IolStatementParser",
]
