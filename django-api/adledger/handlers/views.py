"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from rest_framework import exceptions, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from adledger.conf import ledger_settings
from adledger.domain import BookingStatus, ChargeMode, LabelKind
from adledger.domain.errors import DomainError, ErrorKind
from adledger.domain.pricing import PriceMode
from adledger.handlers import serializers as s
from adledger.services import BookingFilter, LeafletFilter, LedgerServices, build_services
from adledger.stores.django_store import DjangoLedgerStore

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNKNOWN_ISSUE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_RANGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PRICE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.DUPLICATE: status.HTTP_409_CONFLICT,
    ErrorKind.PROTECTED: status.HTTP_409_CONFLICT,
    ErrorKind.ISSUE_CLOSED: status.HTTP_409_CONFLICT,
}


def domain_error_response(error: DomainError) -> Response:
    return Response(
        {"code": error.code.value, "message": error.message},
        status=STATUS_BY_KIND[error.kind],
    )


def _flag(request: Request, name: str) -> bool:
    return request.query_params.get(name, "").lower() in ("1", "true", "yes")


def _booking_filter(query: s.BookingQuerySerializer) -> BookingFilter:
    data = query.validated_data
    return BookingFilter(
        customer_ref=data.get("customer_ref"),
        magazine_id=data.get("magazine_id"),
        issue_name=data.get("issue"),
        content_type=data.get("content_type"),
        status=BookingStatus(data["status"]) if "status" in data else None,
    )


def _leaflet_filter(query: s.LeafletQuerySerializer) -> LeafletFilter:
    data = query.validated_data
    return LeafletFilter(
        customer_ref=data.get("customer_ref"),
        magazine_id=data.get("magazine_id"),
        issue_name=data.get("issue"),
        status=BookingStatus(data["status"]) if "status" in data else None,
    )


class LedgerView(APIView):
    """Base handler: owner scoping, service wiring and error mapping."""

    permission_classes = [IsAuthenticated]

    @property
    def services(self) -> LedgerServices:
        if not hasattr(self, "_services"):
            self._services = build_services(DjangoLedgerStore(), ledger_settings())
        return self._services

    @property
    def owner_id(self) -> str:
        return str(self.request.user.pk)

    def parse(self, serializer_class, data):
        serializer = serializer_class(data=data)
        serializer.is_valid(raise_exception=True)
        return serializer

    def handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, DomainError):
            logger.info("Request rejected: %s", exc.code.value)
            return domain_error_response(exc)
        if isinstance(exc, exceptions.ValidationError):
            return Response(
                {"code": "VALIDATION", "message": "Invalid request", "errors": exc.detail},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().handle_exception(exc)


# Schedules


class ScheduleListView(LedgerView):
    """Handler for GET/POST /api/schedules"""

    def get(self, request: Request) -> Response:
        schedules = self.services.schedules.list_schedules(
            self.owner_id, include_archived=_flag(request, "include_archived")
        )
        return Response(s.ScheduleSerializer(schedules, many=True).data)

    def post(self, request: Request) -> Response:
        body = self.parse(s.ScheduleInputSerializer, request.data)
        schedule = self.services.schedules.create_schedule(
            self.owner_id, body.validated_data.get("name", ""), body.issue_drafts()
        )
        return Response(s.ScheduleSerializer(schedule).data, status=status.HTTP_201_CREATED)


class ScheduleDetailView(LedgerView):
    """Handler for GET/PUT/DELETE /api/schedules/{schedule_id}"""

    def get(self, request: Request, schedule_id: str) -> Response:
        schedule = self.services.schedules.get_schedule(self.owner_id, schedule_id)
        return Response(s.ScheduleSerializer(schedule).data)

    def put(self, request: Request, schedule_id: str) -> Response:
        body = self.parse(s.ScheduleInputSerializer, request.data)
        schedule = self.services.schedules.update_schedule(
            self.owner_id,
            schedule_id,
            body.issue_drafts(),
            name=body.validated_data.get("name"),
        )
        return Response(s.ScheduleSerializer(schedule).data)

    def delete(self, request: Request, schedule_id: str) -> Response:
        self.services.schedules.delete_schedule(self.owner_id, schedule_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ScheduleArchiveView(LedgerView):
    """Handler for POST /api/schedules/{schedule_id}/archive"""

    def post(self, request: Request, schedule_id: str) -> Response:
        schedule = self.services.schedules.toggle_archive(self.owner_id, schedule_id)
        return Response(s.ScheduleSerializer(schedule).data)


class AvailableIssuesView(LedgerView):
    """Handler for GET /api/schedules/{schedule_id}/available-issues"""

    def get(self, request: Request, schedule_id: str) -> Response:
        issues = self.services.schedules.available_issues(self.owner_id, schedule_id)
        return Response(s.IssueSerializer(issues, many=True).data)


class CurrentIssueView(LedgerView):
    """Handler for GET /api/issues/current"""

    def get(self, request: Request) -> Response:
        issue = self.services.schedules.current_issue(self.owner_id)
        return Response(s.IssueSerializer(issue).data)


class IssueAvailabilityView(LedgerView):
    """Handler for GET /api/issues/{issue_name}/availability"""

    def get(self, request: Request, issue_name: str) -> Response:
        availability = self.services.schedules.validate_issue(self.owner_id, issue_name)
        return Response(s.IssueAvailabilitySerializer(availability).data)


# Magazines


class MagazineListView(LedgerView):
    """Handler for GET/POST /api/magazines"""

    def get(self, request: Request) -> Response:
        magazines = self.services.magazines.list_magazines(
            self.owner_id, include_archived=_flag(request, "include_archived")
        )
        return Response(s.MagazineSerializer(magazines, many=True).data)

    def post(self, request: Request) -> Response:
        body = self.parse(s.MagazineInputSerializer, request.data).validated_data
        magazine = self.services.magazines.create_magazine(
            self.owner_id,
            body["name"],
            body["schedule_id"],
            page_configurations=body["page_configurations"],
        )
        return Response(s.MagazineSerializer(magazine).data, status=status.HTTP_201_CREATED)


class MagazineDetailView(LedgerView):
    """Handler for GET/PATCH/DELETE /api/magazines/{magazine_id}"""

    def get(self, request: Request, magazine_id: str) -> Response:
        magazine = self.services.magazines.get_magazine(self.owner_id, magazine_id)
        return Response(s.MagazineSerializer(magazine).data)

    def patch(self, request: Request, magazine_id: str) -> Response:
        body = self.parse(s.MagazineUpdateSerializer, request.data).validated_data
        magazine = self.services.magazines.update_magazine(
            self.owner_id,
            magazine_id,
            name=body.get("name"),
            schedule_id=body.get("schedule_id"),
        )
        return Response(s.MagazineSerializer(magazine).data)

    def delete(self, request: Request, magazine_id: str) -> Response:
        self.services.magazines.delete_magazine(self.owner_id, magazine_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MagazineArchiveView(LedgerView):
    """Handler for POST /api/magazines/{magazine_id}/archive and /unarchive"""

    archived = True

    def post(self, request: Request, magazine_id: str) -> Response:
        catalog = self.services.magazines
        if self.archived:
            magazine = catalog.archive(self.owner_id, magazine_id)
        else:
            magazine = catalog.unarchive(self.owner_id, magazine_id)
        return Response(s.MagazineSerializer(magazine).data)


class MagazineIssuesView(LedgerView):
    """Handler for GET /api/magazines/{magazine_id}/issues"""

    def get(self, request: Request, magazine_id: str) -> Response:
        budgets = self.services.magazines.issue_budgets(self.owner_id, magazine_id)
        return Response(s.IssueBudgetSerializer(budgets, many=True).data)


class PageBudgetView(LedgerView):
    """Handler for PUT /api/magazines/{magazine_id}/issues/{issue_name}"""

    def put(self, request: Request, magazine_id: str, issue_name: str) -> Response:
        body = self.parse(s.PageBudgetSerializer, request.data).validated_data
        magazine = self.services.magazines.set_page_budget(
            self.owner_id, magazine_id, issue_name, body["total_pages"]
        )
        return Response(s.MagazineSerializer(magazine).data)


# Pricing


class ContentSizeListView(LedgerView):
    """Handler for GET/POST /api/content-sizes"""

    def get(self, request: Request) -> Response:
        content_sizes = self.services.pricing.list_content_sizes(
            self.owner_id, include_archived=_flag(request, "include_archived")
        )
        return Response(s.ContentSizeSerializer(content_sizes, many=True).data)

    def post(self, request: Request) -> Response:
        body = self.parse(s.ContentSizeInputSerializer, request.data).validated_data
        content_size = self.services.pricing.create_content_size(
            self.owner_id, body["description"], body["size"], body["pricing"]
        )
        return Response(
            s.ContentSizeSerializer(content_size).data, status=status.HTTP_201_CREATED
        )


class ContentSizeDetailView(LedgerView):
    """Handler for GET/PUT/DELETE /api/content-sizes/{content_size_id}"""

    def get(self, request: Request, content_size_id: str) -> Response:
        content_size = self.services.pricing.get_content_size(self.owner_id, content_size_id)
        return Response(s.ContentSizeSerializer(content_size).data)

    def put(self, request: Request, content_size_id: str) -> Response:
        body = self.parse(s.ContentSizeInputSerializer, request.data).validated_data
        content_size = self.services.pricing.update_content_size(
            self.owner_id, content_size_id, body["description"], body["size"], body["pricing"]
        )
        return Response(s.ContentSizeSerializer(content_size).data)

    def delete(self, request: Request, content_size_id: str) -> Response:
        self.services.pricing.delete_content_size(self.owner_id, content_size_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ContentSizeArchiveView(LedgerView):
    """Handler for POST /api/content-sizes/{content_size_id}/archive"""

    def post(self, request: Request, content_size_id: str) -> Response:
        content_size = self.services.pricing.toggle_archive(self.owner_id, content_size_id)
        return Response(s.ContentSizeSerializer(content_size).data)


class ContentSizePriceView(LedgerView):
    """Handler for GET/PUT /api/content-sizes/{content_size_id}/prices"""

    def get(self, request: Request, content_size_id: str) -> Response:
        query = self.parse(s.ListPriceQuerySerializer, request.query_params).validated_data
        price = self.services.pricing.list_price(
            self.owner_id,
            content_size_id,
            query["magazine_id"],
            PriceMode(query["mode"]),
        )
        return Response({"mode": query["mode"], "list_price": str(price.rounded())})

    def put(self, request: Request, content_size_id: str) -> Response:
        body = self.parse(s.PriceInputSerializer, request.data).validated_data
        content_size = self.services.pricing.set_price(
            self.owner_id, content_size_id, body["magazine_id"], body["price"]
        )
        return Response(s.ContentSizeSerializer(content_size).data)


# Labels


class LabelListView(LedgerView):
    """Handler for GET/POST /api/content-types and /api/business-types"""

    kind = LabelKind.CONTENT_TYPE

    def get(self, request: Request) -> Response:
        labels = self.services.labels.list_labels(
            self.owner_id, self.kind, include_archived=_flag(request, "include_archived")
        )
        return Response(s.LabelSerializer(labels, many=True).data)

    def post(self, request: Request) -> Response:
        body = self.parse(s.LabelInputSerializer, request.data).validated_data
        label = self.services.labels.create_label(
            self.owner_id, self.kind, body["name"], body["description"]
        )
        return Response(s.LabelSerializer(label).data, status=status.HTTP_201_CREATED)


class LabelDetailView(LedgerView):
    """Handler for PATCH/DELETE /api/content-types/{label_id} (and business types)"""

    kind = LabelKind.CONTENT_TYPE

    def patch(self, request: Request, label_id: str) -> Response:
        body = self.parse(s.LabelUpdateSerializer, request.data).validated_data
        label = self.services.labels.rename_label(
            self.owner_id,
            self.kind,
            label_id,
            name=body.get("name"),
            description=body.get("description"),
        )
        return Response(s.LabelSerializer(label).data)

    def delete(self, request: Request, label_id: str) -> Response:
        self.services.labels.delete_label(self.owner_id, self.kind, label_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class LabelArchiveView(LedgerView):
    """Handler for POST /api/content-types/{label_id}/archive and /restore"""

    kind = LabelKind.CONTENT_TYPE
    archived = True

    def post(self, request: Request, label_id: str) -> Response:
        labels = self.services.labels
        if self.archived:
            label = labels.archive_label(self.owner_id, self.kind, label_id)
        else:
            label = labels.restore_label(self.owner_id, self.kind, label_id)
        return Response(s.LabelSerializer(label).data)


class SeedDefaultsView(LedgerView):
    """Handler for POST /api/labels/seed"""

    def post(self, request: Request) -> Response:
        created = self.services.labels.seed_defaults(self.owner_id)
        return Response({"created": created})


# Bookings


class BookingListView(LedgerView):
    """Handler for GET/POST /api/bookings"""

    def get(self, request: Request) -> Response:
        criteria = _booking_filter(self.parse(s.BookingQuerySerializer, request.query_params))
        bookings = self.services.bookings.list_bookings(self.owner_id, criteria)
        return Response(s.BookingSerializer(bookings, many=True).data)

    def post(self, request: Request) -> Response:
        body = self.parse(s.BookingInputSerializer, request.data)
        data = body.validated_data
        booking = self.services.bookings.create_booking(
            self.owner_id,
            data.get("customer_ref", ""),
            body.entry_drafts(),
            additional_charges=data.get("additional_charges", 0),
            notes=data.get("notes", ""),
            charge_mode=ChargeMode(data["charge_mode"]) if "charge_mode" in data else None,
        )
        return Response(s.BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class BookingReportView(LedgerView):
    """Handler for GET /api/bookings/report"""

    def get(self, request: Request) -> Response:
        criteria = _booking_filter(self.parse(s.BookingQuerySerializer, request.query_params))
        report = self.services.bookings.report(self.owner_id, criteria)
        return Response(s.BookingReportSerializer(report).data)


class BookingDetailView(LedgerView):
    """Handler for GET/PUT/DELETE /api/bookings/{booking_id}"""

    def get(self, request: Request, booking_id: str) -> Response:
        booking = self.services.bookings.get_booking(self.owner_id, booking_id)
        return Response(s.BookingSerializer(booking).data)

    def put(self, request: Request, booking_id: str) -> Response:
        body = self.parse(s.BookingInputSerializer, request.data)
        data = body.validated_data
        booking = self.services.bookings.update_booking(
            self.owner_id,
            booking_id,
            body.entry_drafts(),
            additional_charges=data.get("additional_charges"),
            notes=data.get("notes"),
            status=BookingStatus(data["status"]) if "status" in data else None,
            charge_mode=ChargeMode(data["charge_mode"]) if "charge_mode" in data else None,
        )
        return Response(s.BookingSerializer(booking).data)

    def delete(self, request: Request, booking_id: str) -> Response:
        self.services.bookings.delete_booking(self.owner_id, booking_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Leaflet deliveries


class LeafletListView(LedgerView):
    """Handler for GET/POST /api/leaflet-deliveries"""

    def get(self, request: Request) -> Response:
        criteria = _leaflet_filter(self.parse(s.LeafletQuerySerializer, request.query_params))
        deliveries = self.services.leaflets.list_deliveries(self.owner_id, criteria)
        return Response(s.LeafletDeliverySerializer(deliveries, many=True).data)

    def post(self, request: Request) -> Response:
        body = self.parse(s.LeafletInputSerializer, request.data)
        delivery = self.services.leaflets.create_delivery(
            self.owner_id, body.validated_data["customer_ref"], body.leaflet_draft()
        )
        return Response(s.LeafletDeliverySerializer(delivery).data, status=status.HTTP_201_CREATED)


class LeafletReportView(LedgerView):
    """Handler for GET /api/leaflet-deliveries/report"""

    def get(self, request: Request) -> Response:
        criteria = _leaflet_filter(self.parse(s.LeafletQuerySerializer, request.query_params))
        report = self.services.leaflets.report(self.owner_id, criteria)
        return Response(s.LeafletReportSerializer(report).data)


class LeafletDetailView(LedgerView):
    """Handler for GET/PUT/DELETE /api/leaflet-deliveries/{delivery_id}"""

    def get(self, request: Request, delivery_id: str) -> Response:
        delivery = self.services.leaflets.get_delivery(self.owner_id, delivery_id)
        return Response(s.LeafletDeliverySerializer(delivery).data)

    def put(self, request: Request, delivery_id: str) -> Response:
        body = self.parse(s.LeafletInputSerializer, request.data)
        data = body.validated_data
        delivery = self.services.leaflets.update_delivery(
            self.owner_id,
            delivery_id,
            data["customer_ref"],
            body.leaflet_draft(),
            status=BookingStatus(data["status"]) if "status" in data else None,
        )
        return Response(s.LeafletDeliverySerializer(delivery).data)

    def delete(self, request: Request, delivery_id: str) -> Response:
        self.services.leaflets.delete_delivery(self.owner_id, delivery_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Dashboard


class CurrentIssueBreakdownView(LedgerView):
    """Handler for GET /api/dashboard/current-issue/{magazine_id}"""

    def get(self, request: Request, magazine_id: str) -> Response:
        breakdown = self.services.aggregation.current_issue_breakdown(self.owner_id, magazine_id)
        return Response(s.IssueBreakdownSerializer(breakdown).data)


class PublicationsRevenueView(LedgerView):
    """Handler for GET /api/dashboard/publications"""

    def get(self, request: Request) -> Response:
        rollups = self.services.aggregation.publications_revenue(
            self.owner_id,
            issue_name=request.query_params.get("issue") or None,
            include_archived=_flag(request, "include_archived"),
        )
        return Response(s.PublicationRevenueSerializer(rollups, many=True).data)


class TopCustomersView(LedgerView):
    """Handler for GET /api/dashboard/top-customers"""

    def get(self, request: Request) -> Response:
        limit = request.query_params.get("limit", ledger_settings()["TOP_CUSTOMERS_LIMIT"])
        try:
            limit = int(limit)
        except ValueError as exc:
            raise exceptions.ValidationError({"limit": ["A valid integer is required."]}) from exc
        customers = self.services.aggregation.top_customers(self.owner_id, limit=max(limit, 0))
        return Response(s.CustomerTotalSerializer(customers, many=True).data)


class DashboardStatsView(LedgerView):
    """Handler for GET /api/dashboard/stats"""

    def get(self, request: Request) -> Response:
        stats = self.services.aggregation.dashboard_stats(self.owner_id)
        return Response(s.DashboardStatsSerializer(stats).data)


class RecentActivityView(LedgerView):
    """Handler for GET /api/dashboard/recent-activity"""

    def get(self, request: Request) -> Response:
        items = self.services.aggregation.recent_activity(self.owner_id)
        return Response(s.ActivityItemSerializer(items, many=True).data)
