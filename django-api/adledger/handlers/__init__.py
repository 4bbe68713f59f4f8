from adledger.handlers.views import (
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

__all__ = [
    "AvailableIssuesView",
    "BookingDetailView",
    "BookingListView",
    "BookingReportView",
    "ContentSizeArchiveView",
    "ContentSizeDetailView",
    "ContentSizeListView",
    "ContentSizePriceView",
    "CurrentIssueBreakdownView",
    "CurrentIssueView",
    "DashboardStatsView",
    "IssueAvailabilityView",
    "LabelArchiveView",
    "LabelDetailView",
    "LabelListView",
    "LeafletDetailView",
    "LeafletListView",
    "LeafletReportView",
    "MagazineArchiveView",
    "MagazineDetailView",
    "MagazineIssuesView",
    "MagazineListView",
    "PageBudgetView",
    "PublicationsRevenueView",
    "RecentActivityView",
    "ScheduleArchiveView",
    "ScheduleDetailView",
    "ScheduleListView",
    "SeedDefaultsView",
    "TopCustomersView",
]
