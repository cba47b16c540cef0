"""Import services (row assembly, sessions, file-level runs)."""

from datafile_ingestion.services.import_service import ImportRun, ImportService
from datafile_ingestion.services.import_session import ImportSession
from datafile_ingestion.services.row_assembler import AssembledRow, RowAssembler

__all__ = [
    "AssembledRow",
    "ImportRun",
    "ImportService",
    "ImportSession",
    "RowAssembler",
]
