from adledger.domain.models import (
    DEFAULT_PAGE_COUNT,
    Booking,
    BookingEntry,
    BookingStatus,
    ChargeMode,
    ContentSize,
    EntryDraft,
    Issue,
    IssueDraft,
    Label,
    LabelKind,
    LeafletDelivery,
    LeafletDraft,
    Magazine,
    Schedule,
)
from adledger.domain.value_objects import (
    BookingId,
    ContentSizeId,
    IssueKey,
    LabelId,
    LeafletDeliveryId,
    MagazineId,
    Money,
    PageCount,
    PageUnits,
    Percentage,
    ScheduleId,
)

__all__ = [
    "DEFAULT_PAGE_COUNT",
    "Booking",
    "BookingEntry",
    "BookingStatus",
    "ChargeMode",
    "ContentSize",
    "EntryDraft",
    "Issue",
    "IssueDraft",
    "Label",
    "LabelKind",
    "LeafletDelivery",
    "LeafletDraft",
    "Magazine",
    "Schedule",
    "BookingId",
    "ContentSizeId",
    "IssueKey",
    "LabelId",
    "LeafletDeliveryId",
    "MagazineId",
    "Money",
    "PageCount",
    "PageUnits",
    "Percentage",
    "ScheduleId",
]
