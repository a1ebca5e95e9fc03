from ticketing.handlers.views import (
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

__all__ = [
    "CheckinListView",
    "CheckinLogListView",
    "CheckinResetView",
    "CheckinView",
    "CheckinWithPaymentView",
    "DuplicateReservationsView",
    "PartialResetView",
    "PaymentView",
    "PerformanceDetailView",
    "PerformanceListView",
    "PerformanceStatsView",
    "ProductionDetailView",
    "ProductionListView",
    "PublicReceptionView",
    "PublicReservationView",
    "ReceptionScheduleView",
    "ReceptionStatusView",
    "ReservationCancelView",
    "ReservationDetailView",
    "ReservationListView",
    "ReservationRestoreView",
    "SameDayTicketView",
    "TicketTypeDetailView",
    "TicketTypeListView",
]
