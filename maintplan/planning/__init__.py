"""Yearly periodic-maintenance planning for facility equipment."""

from .catalog import EquipmentCatalog, EquipmentRecord, MemoryEquipmentCatalog, SQLEquipmentCatalog
from .errors import EquipmentFailure, NotFound, PlanError, ValidationError
from .lifecycle import LifecycleController
from .manager import GenerationResult, PlanManager, ResetResult
from .service import PlanService
from .status import refresh_overdue
from .store import MemoryOccurrenceStore, OccurrenceStore, SQLOccurrenceStore

__all__ = [
    "EquipmentCatalog",
    "EquipmentFailure",
    "EquipmentRecord",
    "GenerationResult",
    "LifecycleController",
    "MemoryEquipmentCatalog",
    "MemoryOccurrenceStore",
    "NotFound",
    "OccurrenceStore",
    "PlanError",
    "PlanManager",
    "PlanService",
    "ResetResult",
    "SQLEquipmentCatalog",
    "SQLOccurrenceStore",
    "ValidationError",
    "refresh_overdue",
]
