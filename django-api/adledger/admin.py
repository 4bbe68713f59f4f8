from django.contrib import admin

from adledger.models import (
    Booking,
    BookingEntry,
    ContentSize,
    ContentSizePrice,
    Label,
    LeafletDelivery,
    Magazine,
    PageConfiguration,
    Schedule,
    ScheduleIssue,
)


class ScheduleIssueInline(admin.TabularInline):
    model = ScheduleIssue
    extra = 1


class PageConfigurationInline(admin.TabularInline):
    model = PageConfiguration
    extra = 1


class ContentSizePriceInline(admin.TabularInline):
    model = ContentSizePrice
    extra = 1


class BookingEntryInline(admin.TabularInline):
    model = BookingEntry
    extra = 0


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    list_display = ["name", "owner_id", "archived", "created_at"]
    list_filter = ["archived"]
    search_fields = ["name"]
    inlines = [ScheduleIssueInline]


@admin.register(Magazine)
class MagazineAdmin(admin.ModelAdmin):
    list_display = ["name", "schedule", "owner_id", "archived"]
    list_filter = ["archived", "schedule"]
    search_fields = ["name"]
    inlines = [PageConfigurationInline]


@admin.register(ContentSize)
class ContentSizeAdmin(admin.ModelAdmin):
    list_display = ["description", "size", "owner_id", "archived"]
    list_filter = ["archived"]
    inlines = [ContentSizePriceInline]


@admin.register(Label)
class LabelAdmin(admin.ModelAdmin):
    list_display = ["name", "kind", "owner_id", "is_default", "archived"]
    list_filter = ["kind", "is_default", "archived"]
    search_fields = ["name"]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ["customer_ref", "status", "total_value", "created_at"]
    list_filter = ["status"]
    search_fields = ["customer_ref"]
    inlines = [BookingEntryInline]


@admin.register(LeafletDelivery)
class LeafletDeliveryAdmin(admin.ModelAdmin):
    list_display = ["customer_ref", "magazine", "issue_name", "quantity", "net_value", "status"]
    list_filter = ["status", "magazine"]
    search_fields = ["customer_ref", "description"]
