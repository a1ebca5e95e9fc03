from django.urls import path

from ticketing.handlers import (
    CheckinListView,
    CheckinLogListView,
    CheckinResetView,
    CheckinView,
    CheckinWithPaymentView,
    DuplicateReservationsView,
    PartialResetView,
    PaymentView,
    PerformanceDetailView,
    PerformanceListView,
    PerformanceStatsView,
    ProductionDetailView,
    ProductionListView,
    PublicReceptionView,
    PublicReservationView,
    ReceptionScheduleView,
    ReceptionStatusView,
    ReservationCancelView,
    ReservationDetailView,
    ReservationListView,
    ReservationRestoreView,
    SameDayTicketView,
    TicketTypeDetailView,
    TicketTypeListView,
)

urlpatterns = [
    # Public booking form
    path(
        "public/productions/<str:production_id>",
        PublicReceptionView.as_view(),
        name="public-reception",
    ),
    path(
        "public/productions/<str:production_id>/reservations",
        PublicReservationView.as_view(),
        name="public-reservation",
    ),
    # Productions
    path("productions", ProductionListView.as_view(), name="production-list"),
    path(
        "productions/<str:production_id>",
        ProductionDetailView.as_view(),
        name="production-detail",
    ),
    path(
        "productions/<str:production_id>/reception-status",
        ReceptionStatusView.as_view(),
        name="reception-status",
    ),
    path(
        "productions/<str:production_id>/reception-schedule",
        ReceptionScheduleView.as_view(),
        name="reception-schedule",
    ),
    path(
        "productions/<str:production_id>/performances",
        PerformanceListView.as_view(),
        name="performance-list",
    ),
    path(
        "productions/<str:production_id>/ticket-types",
        TicketTypeListView.as_view(),
        name="ticket-type-list",
    ),
    path(
        "productions/<str:production_id>/ticket-types/<str:ticket_type_id>",
        TicketTypeDetailView.as_view(),
        name="ticket-type-detail",
    ),
    path(
        "productions/<str:production_id>/stats",
        PerformanceStatsView.as_view(),
        name="performance-stats",
    ),
    path(
        "productions/<str:production_id>/duplicates",
        DuplicateReservationsView.as_view(),
        name="duplicate-reservations",
    ),
    # Performances
    path(
        "performances/<str:performance_id>",
        PerformanceDetailView.as_view(),
        name="performance-detail",
    ),
    path(
        "performances/<str:performance_id>/reservations",
        CheckinListView.as_view(),
        name="checkin-list",
    ),
    path(
        "performances/<str:performance_id>/same-day-tickets",
        SameDayTicketView.as_view(),
        name="same-day-ticket",
    ),
    # Reservations
    path("reservations", ReservationListView.as_view(), name="reservation-list"),
    path(
        "reservations/<str:reservation_id>",
        ReservationDetailView.as_view(),
        name="reservation-detail",
    ),
    path(
        "reservations/<str:reservation_id>/cancel",
        ReservationCancelView.as_view(),
        name="reservation-cancel",
    ),
    path(
        "reservations/<str:reservation_id>/restore",
        ReservationRestoreView.as_view(),
        name="reservation-restore",
    ),
    path(
        "reservations/<str:reservation_id>/checkin",
        CheckinView.as_view(),
        name="checkin",
    ),
    path(
        "reservations/<str:reservation_id>/checkin-reset",
        CheckinResetView.as_view(),
        name="checkin-reset",
    ),
    path(
        "reservations/<str:reservation_id>/checkin-payment",
        CheckinWithPaymentView.as_view(),
        name="checkin-payment",
    ),
    path(
        "reservations/<str:reservation_id>/partial-reset",
        PartialResetView.as_view(),
        name="partial-reset",
    ),
    path(
        "reservations/<str:reservation_id>/payments",
        PaymentView.as_view(),
        name="payment",
    ),
    path(
        "reservations/<str:reservation_id>/logs",
        CheckinLogListView.as_view(),
        name="checkin-log-list",
    ),
]
