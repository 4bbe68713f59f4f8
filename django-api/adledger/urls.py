from django.urls import path

from adledger.domain import LabelKind
from adledger.handlers import (
    AvailableIssuesView,
    BookingDetailView,
    BookingListView,
    BookingReportView,
    ContentSizeArchiveView,
    ContentSizeDetailView,
    ContentSizeListView,
    ContentSizePriceView,
    CurrentIssueBreakdownView,
    CurrentIssueView,
    DashboardStatsView,
    IssueAvailabilityView,
    LabelArchiveView,
    LabelDetailView,
    LabelListView,
    LeafletDetailView,
    LeafletListView,
    LeafletReportView,
    MagazineArchiveView,
    MagazineDetailView,
    MagazineIssuesView,
    MagazineListView,
    PageBudgetView,
    PublicationsRevenueView,
    RecentActivityView,
    ScheduleArchiveView,
    ScheduleDetailView,
    ScheduleListView,
    SeedDefaultsView,
    TopCustomersView,
)


def _label_routes(prefix: str, kind: LabelKind) -> list:
    return [
        path(prefix, LabelListView.as_view(kind=kind), name=f"{prefix}-list"),
        path(
            f"{prefix}/<str:label_id>",
            LabelDetailView.as_view(kind=kind),
            name=f"{prefix}-detail",
        ),
        path(
            f"{prefix}/<str:label_id>/archive",
            LabelArchiveView.as_view(kind=kind, archived=True),
            name=f"{prefix}-archive",
        ),
        path(
            f"{prefix}/<str:label_id>/restore",
            LabelArchiveView.as_view(kind=kind, archived=False),
            name=f"{prefix}-restore",
        ),
    ]


urlpatterns = [
    path("schedules", ScheduleListView.as_view(), name="schedule-list"),
    path("schedules/<str:schedule_id>", ScheduleDetailView.as_view(), name="schedule-detail"),
    path(
        "schedules/<str:schedule_id>/archive",
        ScheduleArchiveView.as_view(),
        name="schedule-archive",
    ),
    path(
        "schedules/<str:schedule_id>/available-issues",
        AvailableIssuesView.as_view(),
        name="schedule-available-issues",
    ),
    path("issues/current", CurrentIssueView.as_view(), name="issue-current"),
    path(
        "issues/<str:issue_name>/availability",
        IssueAvailabilityView.as_view(),
        name="issue-availability",
    ),
    path("magazines", MagazineListView.as_view(), name="magazine-list"),
    path("magazines/<str:magazine_id>", MagazineDetailView.as_view(), name="magazine-detail"),
    path(
        "magazines/<str:magazine_id>/archive",
        MagazineArchiveView.as_view(archived=True),
        name="magazine-archive",
    ),
    path(
        "magazines/<str:magazine_id>/unarchive",
        MagazineArchiveView.as_view(archived=False),
        name="magazine-unarchive",
    ),
    path(
        "magazines/<str:magazine_id>/issues",
        MagazineIssuesView.as_view(),
        name="magazine-issues",
    ),
    path(
        "magazines/<str:magazine_id>/issues/<str:issue_name>",
        PageBudgetView.as_view(),
        name="magazine-page-budget",
    ),
    path("content-sizes", ContentSizeListView.as_view(), name="content-size-list"),
    path(
        "content-sizes/<str:content_size_id>",
        ContentSizeDetailView.as_view(),
        name="content-size-detail",
    ),
    path(
        "content-sizes/<str:content_size_id>/archive",
        ContentSizeArchiveView.as_view(),
        name="content-size-archive",
    ),
    path(
        "content-sizes/<str:content_size_id>/prices",
        ContentSizePriceView.as_view(),
        name="content-size-prices",
    ),
    path("labels/seed", SeedDefaultsView.as_view(), name="label-seed"),
    *_label_routes("content-types", LabelKind.CONTENT_TYPE),
    *_label_routes("business-types", LabelKind.BUSINESS_TYPE),
    path("bookings", BookingListView.as_view(), name="booking-list"),
    path("bookings/report", BookingReportView.as_view(), name="booking-report"),
    path("bookings/<str:booking_id>", BookingDetailView.as_view(), name="booking-detail"),
    path("leaflet-deliveries", LeafletListView.as_view(), name="leaflet-list"),
    path("leaflet-deliveries/report", LeafletReportView.as_view(), name="leaflet-report"),
    path(
        "leaflet-deliveries/<str:delivery_id>",
        LeafletDetailView.as_view(),
        name="leaflet-detail",
    ),
    path(
        "dashboard/current-issue/<str:magazine_id>",
        CurrentIssueBreakdownView.as_view(),
        name="dashboard-current-issue",
    ),
    path(
        "dashboard/publications",
        PublicationsRevenueView.as_view(),
        name="dashboard-publications",
    ),
    path(
        "dashboard/top-customers",
        TopCustomersView.as_view(),
        name="dashboard-top-customers",
    ),
    path("dashboard/stats", DashboardStatsView.as_view(), name="dashboard-stats"),
    path(
        "dashboard/recent-activity",
        RecentActivityView.as_view(),
        name="dashboard-recent-activity",
    ),
]
