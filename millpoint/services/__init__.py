from .machine import MachineService
from .program import ProgramService
from .search import IndexEvent, SearchClient, SearchIndexer, program_document
from .setup_sheet import IncomingFile, SetupSheetService

__all__ = [
    "MachineService",
    "ProgramService",
    "SetupSheetService",
    "IncomingFile",
    "SearchClient",
    "SearchIndexer",
    "IndexEvent",
    "program_document",
]
