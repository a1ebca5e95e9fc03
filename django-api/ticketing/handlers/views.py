"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details

Staff endpoints identify the organization by the X-Organization-Id header;
the public reception and booking endpoints need none.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import ParseError, ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.domain.errors import NOT_FOUND_CODES, DomainError, ErrorCode
from ticketing.handlers import serializers as s
from ticketing.services import BookingService, LedgerService, ProductionService, ReportService
from ticketing.stores.django_store import DjangoProductionStore, DjangoReservationStore

logger = logging.getLogger(__name__)

ORGANIZATION_HEADER = "X-Organization-Id"

_STATUS_BY_CODE = {
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RECEPTION_CLOSED: status.HTTP_403_FORBIDDEN,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorCode.RESOURCE_IN_USE: status.HTTP_409_CONFLICT,
}


def error_response(error: DomainError) -> Response:
    if error.code in NOT_FOUND_CODES:
        http_status = status.HTTP_404_NOT_FOUND
    else:
        http_status = _STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST)
    logger.warning("request rejected: %s", error)
    return Response(
        {"error": {"code": error.code.value, "message": error.message}},
        status=http_status,
    )


def ledger_service() -> LedgerService:
    return LedgerService(DjangoReservationStore(), DjangoProductionStore())


def booking_service() -> BookingService:
    return BookingService(DjangoReservationStore(), DjangoProductionStore())


def production_service() -> ProductionService:
    return ProductionService(DjangoProductionStore())


def report_service() -> ReportService:
    return ReportService(DjangoReservationStore(), DjangoProductionStore())


class TicketingAPIView(APIView):
    """Base view that turns domain and validation errors into one error shape."""

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            return error_response(exc)
        if isinstance(exc, (ValidationError, ParseError)):
            return Response(
                {
                    "error": {
                        "code": ErrorCode.INVALID_INPUT.value,
                        "message": "Invalid request",
                        "details": exc.detail,
                    }
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().handle_exception(exc)

    def organization_id(self, request: Request) -> str:
        return request.headers.get(ORGANIZATION_HEADER, "")

    def validated(self, serializer_class, request: Request) -> dict:
        serializer = serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data


# Public


class PublicReceptionView(TicketingAPIView):
    """Handler for GET /api/public/productions/{production_id}"""

    def get(self, request: Request, production_id: str) -> Response:
        view = booking_service().get_reception(production_id)
        production = view.production
        return Response(
            {
                "production_id": str(production.id),
                "title": production.title,
                "status": view.status.value,
                "ticket_types": s.TicketTypeSerializer(
                    [t for t in production.ticket_types if t.is_public], many=True
                ).data,
                "performances": [
                    {
                        **s.PerformanceSerializer(performance).data,
                        "reception_open": performance.id in view.open_performances,
                    }
                    for performance in sorted(production.performances, key=lambda p: p.start_time)
                ],
            }
        )


class PublicReservationView(TicketingAPIView):
    """Handler for POST /api/public/productions/{production_id}/reservations"""

    def post(self, request: Request, production_id: str) -> Response:
        data = self.validated(s.PublicReservationInputSerializer, request)
        reservation = booking_service().create_public_reservation(
            production_id,
            str(data["performance_id"]),
            customer_name=data["customer_name"],
            customer_email=data["customer_email"],
            tickets=data["tickets"],
            customer_name_kana=data["customer_name_kana"],
            remarks=data["remarks"],
        )
        return Response(s.ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)


# Productions


class ProductionListView(TicketingAPIView):
    """Handler for GET/POST /api/productions"""

    def get(self, request: Request) -> Response:
        productions = production_service().list_productions(self.organization_id(request))
        return Response(s.ProductionSerializer(productions, many=True).data)

    def post(self, request: Request) -> Response:
        data = self.validated(s.ProductionInputSerializer, request)
        production = production_service().create_production(
            self.organization_id(request), data["title"]
        )
        return Response(s.ProductionSerializer(production).data, status=status.HTTP_201_CREATED)


class ProductionDetailView(TicketingAPIView):
    """Handler for GET/PUT/DELETE /api/productions/{production_id}"""

    def get(self, request: Request, production_id: str) -> Response:
        production = production_service().get_production(
            self.organization_id(request), production_id
        )
        return Response(s.ProductionSerializer(production).data)

    def put(self, request: Request, production_id: str) -> Response:
        data = self.validated(s.ProductionInputSerializer, request)
        production = production_service().update_production(
            self.organization_id(request), production_id, data["title"]
        )
        return Response(s.ProductionSerializer(production).data)

    def delete(self, request: Request, production_id: str) -> Response:
        production_service().delete_production(self.organization_id(request), production_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ReceptionStatusView(TicketingAPIView):
    """Handler for PUT /api/productions/{production_id}/reception-status"""

    def put(self, request: Request, production_id: str) -> Response:
        data = self.validated(s.ReceptionStatusInputSerializer, request)
        production = production_service().update_reception_status(
            self.organization_id(request), production_id, data["reception_status"]
        )
        return Response(s.ProductionSerializer(production).data)


class ReceptionScheduleView(TicketingAPIView):
    """Handler for PUT /api/productions/{production_id}/reception-schedule"""

    def put(self, request: Request, production_id: str) -> Response:
        data = self.validated(s.ReceptionScheduleInputSerializer, request)
        production = production_service().update_reception_schedule(
            self.organization_id(request),
            production_id,
            data["reception_start"],
            data["reception_end"],
            data["reception_end_mode"],
            data["reception_end_minutes"],
        )
        return Response(s.ProductionSerializer(production).data)


class PerformanceListView(TicketingAPIView):
    """Handler for POST /api/productions/{production_id}/performances"""

    def post(self, request: Request, production_id: str) -> Response:
        data = self.validated(s.PerformanceInputSerializer, request)
        performance = production_service().add_performance(
            self.organization_id(request), production_id, data["start_time"], data["capacity"]
        )
        return Response(s.PerformanceSerializer(performance).data, status=status.HTTP_201_CREATED)


class PerformanceDetailView(TicketingAPIView):
    """Handler for PUT/DELETE /api/performances/{performance_id}"""

    def put(self, request: Request, performance_id: str) -> Response:
        data = self.validated(s.PerformanceInputSerializer, request)
        performance = production_service().update_performance(
            self.organization_id(request), performance_id, data["start_time"], data["capacity"]
        )
        return Response(s.PerformanceSerializer(performance).data)

    def delete(self, request: Request, performance_id: str) -> Response:
        production_service().delete_performance(self.organization_id(request), performance_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TicketTypeListView(TicketingAPIView):
    """Handler for POST /api/productions/{production_id}/ticket-types"""

    def post(self, request: Request, production_id: str) -> Response:
        data = self.validated(s.TicketTypeInputSerializer, request)
        ticket_type = production_service().add_ticket_type(
            self.organization_id(request),
            production_id,
            data["name"],
            data["advance_price"],
            data["door_price"],
        )
        return Response(s.TicketTypeSerializer(ticket_type).data, status=status.HTTP_201_CREATED)


class TicketTypeDetailView(TicketingAPIView):
    """Handler for PUT/DELETE /api/productions/{production_id}/ticket-types/{ticket_type_id}"""

    def put(self, request: Request, production_id: str, ticket_type_id: str) -> Response:
        data = self.validated(s.TicketTypeInputSerializer, request)
        ticket_type = production_service().update_ticket_type(
            self.organization_id(request),
            production_id,
            ticket_type_id,
            data["name"],
            data["advance_price"],
            data["door_price"],
        )
        return Response(s.TicketTypeSerializer(ticket_type).data)

    def delete(self, request: Request, production_id: str, ticket_type_id: str) -> Response:
        production_service().delete_ticket_type(
            self.organization_id(request), production_id, ticket_type_id
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class PerformanceStatsView(TicketingAPIView):
    """Handler for GET /api/productions/{production_id}/stats"""

    def get(self, request: Request, production_id: str) -> Response:
        stats = report_service().performance_stats(self.organization_id(request), production_id)
        return Response(s.PerformanceStatsSerializer(stats, many=True).data)


class DuplicateReservationsView(TicketingAPIView):
    """Handler for GET /api/productions/{production_id}/duplicates"""

    def get(self, request: Request, production_id: str) -> Response:
        groups = report_service().duplicate_reservations(
            self.organization_id(request), production_id
        )
        return Response(s.DuplicateGroupSerializer(groups, many=True).data)


# Reservations


class ReservationListView(TicketingAPIView):
    """Handler for GET/POST /api/reservations"""

    def get(self, request: Request) -> Response:
        reservations = booking_service().search_reservations(
            self.organization_id(request), request.query_params.get("q", "")
        )
        return Response(s.ReservationSerializer(reservations, many=True).data)

    def post(self, request: Request) -> Response:
        data = self.validated(s.ReservationInputSerializer, request)
        reservation = booking_service().create_reservation(
            self.organization_id(request),
            str(data["performance_id"]),
            customer_name=data["customer_name"],
            tickets=data["tickets"],
            customer_name_kana=data["customer_name_kana"],
            customer_email=data["customer_email"],
            remarks=data["remarks"],
        )
        return Response(s.ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)


class ReservationDetailView(TicketingAPIView):
    """Handler for GET/PUT /api/reservations/{reservation_id}"""

    def get(self, request: Request, reservation_id: str) -> Response:
        reservation = booking_service().get_reservation(
            self.organization_id(request), reservation_id
        )
        return Response(s.ReservationSerializer(reservation).data)

    def put(self, request: Request, reservation_id: str) -> Response:
        data = self.validated(s.ReservationUpdateInputSerializer, request)
        performance_id = data["performance_id"]
        reservation = booking_service().update_reservation(
            self.organization_id(request),
            reservation_id,
            customer_name=data["customer_name"],
            tickets=data["tickets"],
            performance_id=str(performance_id) if performance_id else None,
            customer_name_kana=data["customer_name_kana"],
            customer_email=data["customer_email"],
            remarks=data["remarks"],
        )
        return Response(s.ReservationSerializer(reservation).data)


class ReservationCancelView(TicketingAPIView):
    """Handler for POST /api/reservations/{reservation_id}/cancel"""

    def post(self, request: Request, reservation_id: str) -> Response:
        reservation = booking_service().cancel_reservation(
            self.organization_id(request), reservation_id
        )
        return Response(s.ReservationSerializer(reservation).data)


class ReservationRestoreView(TicketingAPIView):
    """Handler for POST /api/reservations/{reservation_id}/restore"""

    def post(self, request: Request, reservation_id: str) -> Response:
        reservation = booking_service().restore_reservation(
            self.organization_id(request), reservation_id
        )
        return Response(s.ReservationSerializer(reservation).data)


# Check-in and payment


class CheckinView(TicketingAPIView):
    """Handler for POST /api/reservations/{reservation_id}/checkin"""

    def post(self, request: Request, reservation_id: str) -> Response:
        data = self.validated(s.CheckinInputSerializer, request)
        result = ledger_service().add_checked_in_tickets(
            self.organization_id(request), reservation_id, data["count"]
        )
        return Response(s.LedgerResultSerializer(result).data)


class CheckinResetView(TicketingAPIView):
    """Handler for POST /api/reservations/{reservation_id}/checkin-reset"""

    def post(self, request: Request, reservation_id: str) -> Response:
        result = ledger_service().reset_check_in(self.organization_id(request), reservation_id)
        return Response(s.LedgerResultSerializer(result).data)


class CheckinWithPaymentView(TicketingAPIView):
    """Handler for POST /api/reservations/{reservation_id}/checkin-payment"""

    def post(self, request: Request, reservation_id: str) -> Response:
        data = self.validated(s.CheckinWithPaymentInputSerializer, request)
        result = ledger_service().process_checkin_with_payment(
            self.organization_id(request),
            reservation_id,
            data["checkin_count"],
            data["paid_amount"],
            data["breakdown"],
        )
        return Response(s.LedgerResultSerializer(result).data)


class PartialResetView(TicketingAPIView):
    """Handler for POST /api/reservations/{reservation_id}/partial-reset"""

    def post(self, request: Request, reservation_id: str) -> Response:
        data = self.validated(s.PartialResetInputSerializer, request)
        result = ledger_service().process_partial_reset(
            self.organization_id(request),
            reservation_id,
            data["reset_count"],
            data["refund_amount"],
            data["breakdown"],
        )
        return Response(s.LedgerResultSerializer(result).data)


class PaymentView(TicketingAPIView):
    """Handler for POST /api/reservations/{reservation_id}/payments"""

    def post(self, request: Request, reservation_id: str) -> Response:
        data = self.validated(s.PaymentInputSerializer, request)
        result = ledger_service().register_payment(
            self.organization_id(request), reservation_id, data["received_amount"]
        )
        return Response(s.LedgerResultSerializer(result).data)


class CheckinLogListView(TicketingAPIView):
    """Handler for GET /api/reservations/{reservation_id}/logs"""

    def get(self, request: Request, reservation_id: str) -> Response:
        entries = ledger_service().list_checkin_logs(self.organization_id(request), reservation_id)
        return Response(s.CheckinLogSerializer(entries, many=True).data)


class CheckinListView(TicketingAPIView):
    """Handler for GET /api/performances/{performance_id}/reservations"""

    def get(self, request: Request, performance_id: str) -> Response:
        reservations = booking_service().list_checkin_reservations(
            self.organization_id(request), performance_id
        )
        return Response(s.ReservationSerializer(reservations, many=True).data)


class SameDayTicketView(TicketingAPIView):
    """Handler for POST /api/performances/{performance_id}/same-day-tickets"""

    def post(self, request: Request, performance_id: str) -> Response:
        data = self.validated(s.SameDayTicketInputSerializer, request)
        reservation = ledger_service().issue_same_day_ticket(
            self.organization_id(request),
            performance_id,
            data["customer_name"],
            data["breakdown"],
            customer_name_kana=data["customer_name_kana"],
        )
        return Response(s.ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)
