from adledger.stores.interfaces import (
    BookingStore,
    ContentSizeStore,
    LabelStore,
    LeafletStore,
    LedgerStore,
    MagazineStore,
    ScheduleStore,
)
from adledger.stores.memory_store import InMemoryLedgerStore

__all__ = [
    "BookingStore",
    "ContentSizeStore",
    "InMemoryLedgerStore",
    "LabelStore",
    "LeafletStore",
    "LedgerStore",
    "MagazineStore",
    "ScheduleStore",
]
