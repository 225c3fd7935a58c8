"""Turn-based cattle drive simulation core."""

from .events import CatalogError, EventCatalog, EventSelector
from .ledger import ResourceLedger
from .models import OutfitConfig, Phase, RunState
from .service import GameService

__all__ = [
    "CatalogError",
    "EventCatalog",
    "EventSelector",
    "GameService",
    "OutfitConfig",
    "Phase",
    "ResourceLedger",
    "RunState",
]
