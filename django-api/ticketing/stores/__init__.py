from ticketing.stores.interfaces import ProductionStore, ReservationStore

__all__ = ["ProductionStore", "ReservationStore"]
