from ticketing.services.booking_service import BookingService, ReceptionView
from ticketing.services.ledger_service import LedgerService
from ticketing.services.production_service import ProductionService
from ticketing.services.report_service import ReportService

__all__ = [
    "BookingService",
    "LedgerService",
    "ProductionService",
    "ReceptionView",
    "ReportService",
]
