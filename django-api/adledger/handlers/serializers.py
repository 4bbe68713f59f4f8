"""Serializers for request parsing and for rendering domain models.

Input serializers only check shape and types; business rules are left to
the services so that every rule has a single owner.
"""

from rest_framework import serializers

from adledger.domain import BookingStatus, ChargeMode, EntryDraft, IssueDraft, LeafletDraft
from adledger.domain.pricing import PriceMode


def _money_field(**kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(max_digits=12, decimal_places=2, **kwargs)


# Input


class IssueInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    close_date = serializers.DateTimeField()


class ScheduleInputSerializer(serializers.Serializer):
    """Body of POST /api/schedules and PUT /api/schedules/{id}."""

    name = serializers.CharField(max_length=255, required=False)
    issues = IssueInputSerializer(many=True, allow_empty=True)

    def issue_drafts(self) -> list[IssueDraft]:
        return [IssueDraft(**issue) for issue in self.validated_data["issues"]]


class MagazineInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    schedule_id = serializers.CharField()
    page_configurations = serializers.DictField(
        child=serializers.IntegerField(), required=False, default=dict
    )


class MagazineUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    schedule_id = serializers.CharField(required=False)


class PageBudgetSerializer(serializers.Serializer):
    total_pages = serializers.IntegerField()


class ContentSizeInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    size = serializers.DecimalField(max_digits=6, decimal_places=3)
    pricing = serializers.DictField(child=_money_field(), required=False, default=dict)


class PriceInputSerializer(serializers.Serializer):
    magazine_id = serializers.CharField()
    price = _money_field()


class ListPriceQuerySerializer(serializers.Serializer):
    magazine_id = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    mode = serializers.ChoiceField(
        choices=[mode.value for mode in PriceMode], default=PriceMode.SUM.value
    )


class LabelInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )


class LabelUpdateSerializer(serializers.Serializer):
    """Partial label update; omitted fields keep their stored value."""

    name = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)


class EntryInputSerializer(serializers.Serializer):
    magazine_id = serializers.CharField()
    content_size_id = serializers.CharField()
    content_type = serializers.CharField(max_length=100)
    start_issue = serializers.CharField(max_length=100)
    finish_issue = serializers.CharField(
        max_length=100, required=False, allow_null=True, allow_blank=True, default=None
    )
    is_ongoing = serializers.BooleanField(required=False, default=False)
    list_price = _money_field(required=False, allow_null=True, default=None)
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, default=0
    )
    discount_value = _money_field(required=False, default=0)


class BookingInputSerializer(serializers.Serializer):
    """Body of POST /api/bookings and PUT /api/bookings/{id}.

    On update the entry list replaces the stored one; omitted scalar
    fields keep their stored value.
    """

    customer_ref = serializers.CharField(max_length=64, required=False)
    entries = EntryInputSerializer(many=True, allow_empty=True)
    additional_charges = _money_field(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    charge_mode = serializers.ChoiceField(
        choices=[mode.value for mode in ChargeMode], required=False
    )
    status = serializers.ChoiceField(
        choices=[status.value for status in BookingStatus], required=False
    )

    def entry_drafts(self) -> list[EntryDraft]:
        return [EntryDraft(**entry) for entry in self.validated_data["entries"]]


class BookingQuerySerializer(serializers.Serializer):
    customer_ref = serializers.CharField(required=False)
    magazine_id = serializers.CharField(required=False)
    issue = serializers.CharField(required=False)
    content_type = serializers.CharField(required=False)
    status = serializers.ChoiceField(
        choices=[status.value for status in BookingStatus], required=False
    )


class LeafletInputSerializer(serializers.Serializer):
    """Body of POST /api/leaflet-deliveries and PUT /api/leaflet-deliveries/{id}."""

    customer_ref = serializers.CharField(max_length=64)
    magazine_id = serializers.CharField()
    issue_name = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(required=False, default=1)
    price = _money_field()
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, default=0
    )
    discount_value = _money_field(required=False, default=0)
    additional_charges = _money_field(required=False, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(
        choices=[status.value for status in BookingStatus], required=False
    )

    def leaflet_draft(self) -> LeafletDraft:
        data = dict(self.validated_data)
        data.pop("customer_ref")
        data.pop("status", None)
        return LeafletDraft(**data)


class LeafletQuerySerializer(serializers.Serializer):
    customer_ref = serializers.CharField(required=False)
    magazine_id = serializers.CharField(required=False)
    issue = serializers.CharField(required=False)
    status = serializers.ChoiceField(
        choices=[status.value for status in BookingStatus], required=False
    )


# Output


class IssueSerializer(serializers.Serializer):
    name = serializers.CharField()
    close_date = serializers.DateTimeField()
    sort_order = serializers.IntegerField()


class ScheduleSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    archived = serializers.BooleanField()
    created_at = serializers.DateTimeField()
    issues = IssueSerializer(many=True)


class IssueAvailabilitySerializer(serializers.Serializer):
    available = serializers.BooleanField()
    issue_name = serializers.CharField()
    close_date = serializers.DateTimeField(allow_null=True)
    schedule_name = serializers.CharField(allow_null=True)


class MagazineSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    schedule_id = serializers.CharField()
    archived = serializers.BooleanField()
    created_at = serializers.DateTimeField()
    page_configurations = serializers.SerializerMethodField()

    def get_page_configurations(self, magazine) -> dict[str, int]:
        return {name: pages.value for name, pages in magazine.page_configurations.items()}


class IssueBudgetSerializer(serializers.Serializer):
    issue_name = serializers.CharField()
    close_date = serializers.DateTimeField()
    total_pages = serializers.IntegerField()
    configured = serializers.BooleanField()


class ContentSizeSerializer(serializers.Serializer):
    id = serializers.CharField()
    description = serializers.CharField()
    size = serializers.DecimalField(source="size.value", max_digits=6, decimal_places=3)
    archived = serializers.BooleanField()
    pricing = serializers.SerializerMethodField()

    def get_pricing(self, content_size) -> dict[str, str]:
        return {str(mid): str(price) for mid, price in content_size.pricing.items()}


class LabelSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    is_default = serializers.BooleanField()
    archived = serializers.BooleanField()


class BookingEntrySerializer(serializers.Serializer):
    magazine_id = serializers.CharField()
    content_size_id = serializers.CharField()
    content_type = serializers.CharField()
    list_price = _money_field(source="list_price.amount")
    discount_percentage = serializers.DecimalField(
        source="discount_percentage.value", max_digits=5, decimal_places=2
    )
    discount_value = _money_field(source="discount_value.amount")
    apportioned_charges = _money_field(source="apportioned_charges.amount")
    net_value = _money_field(source="net_value.amount")
    start_issue = serializers.CharField()
    finish_issue = serializers.CharField(allow_null=True)
    is_ongoing = serializers.BooleanField()


class BookingSerializer(serializers.Serializer):
    id = serializers.CharField()
    customer_ref = serializers.CharField()
    status = serializers.CharField(source="status.value")
    charge_mode = serializers.CharField(source="charge_mode.value")
    additional_charges = _money_field(source="additional_charges.amount")
    total_value = _money_field(source="total_value.amount")
    notes = serializers.CharField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()
    entries = BookingEntrySerializer(many=True)


class ContentTypeSliceSerializer(serializers.Serializer):
    content_type = serializers.CharField()
    pages = serializers.DecimalField(max_digits=8, decimal_places=3)
    count = serializers.IntegerField()
    value = _money_field(source="value.amount")
    percentage = serializers.DecimalField(max_digits=5, decimal_places=1)
    booked_share = serializers.DecimalField(max_digits=5, decimal_places=1, allow_null=True)


class IssueBreakdownSerializer(serializers.Serializer):
    magazine_id = serializers.CharField()
    magazine_name = serializers.CharField()
    issue = serializers.CharField(source="issue.name", allow_null=True)
    total_pages = serializers.IntegerField()
    booked_pages = serializers.DecimalField(max_digits=8, decimal_places=3)
    unallocated_pages = serializers.DecimalField(max_digits=8, decimal_places=3)
    total_value = _money_field(source="total_value.amount")
    slices = ContentTypeSliceSerializer(many=True)


class ContentTypeTotalSerializer(serializers.Serializer):
    content_type = serializers.CharField()
    count = serializers.IntegerField()
    value = _money_field(source="value.amount")


class PublicationRevenueSerializer(serializers.Serializer):
    magazine_id = serializers.CharField()
    magazine_name = serializers.CharField()
    total_entries = serializers.IntegerField()
    total_value = _money_field(source="total_value.amount")
    content_type_breakdown = ContentTypeTotalSerializer(many=True)


class CustomerTotalSerializer(serializers.Serializer):
    customer_ref = serializers.CharField()
    total_bookings = serializers.IntegerField()
    total_value = _money_field(source="total_value.amount")


class LeafletDeliverySerializer(serializers.Serializer):
    id = serializers.CharField()
    customer_ref = serializers.CharField()
    magazine_id = serializers.CharField()
    issue_name = serializers.CharField()
    description = serializers.CharField()
    quantity = serializers.IntegerField()
    price = _money_field(source="price.amount")
    discount_percentage = serializers.DecimalField(
        source="discount_percentage.value", max_digits=5, decimal_places=2
    )
    discount_value = _money_field(source="discount_value.amount")
    additional_charges = _money_field(source="additional_charges.amount")
    net_value = _money_field(source="net_value.amount")
    notes = serializers.CharField()
    status = serializers.CharField(source="status.value")
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class BookingReportRowSerializer(serializers.Serializer):
    booking_id = serializers.CharField()
    customer_ref = serializers.CharField()
    magazine_name = serializers.CharField()
    content_type = serializers.CharField()
    content_size = serializers.CharField()
    size = serializers.DecimalField(
        source="size.value", max_digits=6, decimal_places=3, allow_null=True
    )
    list_price = _money_field(source="list_price.amount")
    net_value = _money_field(source="net_value.amount")
    first_issue = serializers.CharField()
    last_issue = serializers.CharField()
    notes = serializers.CharField()
    status = serializers.CharField(source="status.value")


class LeafletReportRowSerializer(serializers.Serializer):
    delivery_id = serializers.CharField()
    customer_ref = serializers.CharField()
    magazine_name = serializers.CharField()
    issue_name = serializers.CharField()
    description = serializers.CharField()
    quantity = serializers.IntegerField()
    price = _money_field(source="price.amount")
    net_value = _money_field(source="net_value.amount")
    notes = serializers.CharField()
    status = serializers.CharField(source="status.value")


class BookingReportSerializer(serializers.Serializer):
    rows = BookingReportRowSerializer(many=True)
    total = serializers.IntegerField()
    total_value = _money_field(source="total_value.amount")


class LeafletReportSerializer(serializers.Serializer):
    rows = LeafletReportRowSerializer(many=True)
    total = serializers.IntegerField()
    total_value = _money_field(source="total_value.amount")


class DashboardStatsSerializer(serializers.Serializer):
    total_customers = serializers.IntegerField()
    total_magazines = serializers.IntegerField()
    total_bookings = serializers.IntegerField()
    total_leaflet_deliveries = serializers.IntegerField()
    total_booking_value = _money_field(source="total_booking_value.amount")
    total_leaflet_value = _money_field(source="total_leaflet_value.amount")
    total_revenue = _money_field(source="total_revenue.amount")
    booking_change = serializers.IntegerField()
    leaflet_delivery_change = serializers.IntegerField()
    booking_value_change = serializers.IntegerField()
    leaflet_value_change = serializers.IntegerField()
    total_revenue_change = serializers.IntegerField()


class ActivityItemSerializer(serializers.Serializer):
    type = serializers.CharField(source="kind.value")
    id = serializers.CharField()
    customer_ref = serializers.CharField()
    description = serializers.CharField()
    value = _money_field(source="value.amount")
    created_at = serializers.DateTimeField()
