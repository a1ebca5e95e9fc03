"""Serializers for transforming domain models to API responses and parsing input."""

from rest_framework import serializers

from ticketing.domain import ReceptionEndMode, ReceptionStatus

# Output


class TicketTypeSerializer(serializers.Serializer):
    """Serializer for TicketType domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    price = serializers.IntegerField(source="price.amount")
    advance_price = serializers.IntegerField(source="effective_advance_price.amount")
    door_price = serializers.IntegerField(source="effective_door_price.amount")
    is_public = serializers.BooleanField()


class PerformanceSerializer(serializers.Serializer):
    """Serializer for Performance domain model."""

    id = serializers.UUIDField(source="id.value")
    production_id = serializers.UUIDField(source="production_id.value")
    start_time = serializers.DateTimeField()
    capacity = serializers.IntegerField(source="capacity.value")


class ProductionSerializer(serializers.Serializer):
    """Serializer for Production domain model."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    reception_status = serializers.CharField(source="reception_status.value")
    reception_start = serializers.DateTimeField(allow_null=True)
    reception_end = serializers.DateTimeField(allow_null=True)
    reception_end_mode = serializers.CharField(source="reception_end_mode.value")
    reception_end_minutes = serializers.IntegerField()
    performances = PerformanceSerializer(many=True)
    ticket_types = TicketTypeSerializer(many=True)


class TicketLineSerializer(serializers.Serializer):
    ticket_type_id = serializers.UUIDField(source="ticket_type_id.value")
    count = serializers.IntegerField()
    price = serializers.IntegerField(source="price.amount")
    paid_count = serializers.IntegerField()


class ReservationSerializer(serializers.Serializer):
    """Serializer for Reservation domain model, including derived totals."""

    id = serializers.UUIDField(source="id.value")
    performance_id = serializers.UUIDField(source="performance_id.value")
    customer_name = serializers.CharField()
    customer_name_kana = serializers.CharField()
    customer_email = serializers.CharField(allow_null=True)
    remarks = serializers.CharField()
    status = serializers.CharField(source="status.value")
    source = serializers.CharField(source="source.value")
    checkin_status = serializers.CharField(source="checkin_status.value")
    checked_in_tickets = serializers.IntegerField()
    checked_in_at = serializers.DateTimeField(allow_null=True)
    payment_status = serializers.CharField(source="payment_status.value")
    paid_amount = serializers.IntegerField()
    total_tickets = serializers.IntegerField()
    total_amount = serializers.IntegerField()
    tickets = TicketLineSerializer(many=True)
    created_at = serializers.DateTimeField(allow_null=True)


class CheckinLogSerializer(serializers.Serializer):
    """Serializer for CheckinLogEntry domain model."""

    reservation_id = serializers.UUIDField(source="reservation_id.value")
    type = serializers.CharField(source="type.value")
    count = serializers.IntegerField()
    payment_info = serializers.DictField(child=serializers.IntegerField(), allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)


class LedgerResultSerializer(serializers.Serializer):
    reservation = ReservationSerializer()
    log_entry = CheckinLogSerializer(allow_null=True)


class PerformanceStatsSerializer(serializers.Serializer):
    performance_id = serializers.UUIDField(source="performance_id.value")
    start_time = serializers.DateTimeField()
    capacity = serializers.IntegerField()
    booked_count = serializers.IntegerField()
    remaining_count = serializers.IntegerField()
    occupancy_rate = serializers.FloatField()


class DuplicateGroupSerializer(serializers.Serializer):
    id = serializers.CharField()
    reservations = ReservationSerializer(many=True)


# Input


class CheckinInputSerializer(serializers.Serializer):
    count = serializers.IntegerField(min_value=0)


class CheckinWithPaymentInputSerializer(serializers.Serializer):
    checkin_count = serializers.IntegerField(min_value=0)
    paid_amount = serializers.IntegerField(min_value=0)
    breakdown = serializers.DictField(child=serializers.IntegerField(min_value=0), default=dict)


class PartialResetInputSerializer(serializers.Serializer):
    reset_count = serializers.IntegerField(min_value=0)
    refund_amount = serializers.IntegerField(min_value=0)
    breakdown = serializers.DictField(child=serializers.IntegerField(min_value=0), default=dict)


class PaymentInputSerializer(serializers.Serializer):
    received_amount = serializers.IntegerField(min_value=0)


class SameDayTicketInputSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=255)
    customer_name_kana = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    breakdown = serializers.DictField(child=serializers.IntegerField(min_value=0))


class ReservationInputSerializer(serializers.Serializer):
    performance_id = serializers.UUIDField()
    customer_name = serializers.CharField(max_length=255)
    customer_name_kana = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    customer_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True, default=None)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    tickets = serializers.DictField(child=serializers.IntegerField(min_value=0))


class PublicReservationInputSerializer(ReservationInputSerializer):
    customer_email = serializers.EmailField()


class ReservationUpdateInputSerializer(ReservationInputSerializer):
    performance_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class ProductionInputSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)


class ReceptionStatusInputSerializer(serializers.Serializer):
    reception_status = serializers.ChoiceField(choices=[s.value for s in ReceptionStatus])


class ReceptionScheduleInputSerializer(serializers.Serializer):
    reception_start = serializers.DateTimeField(allow_null=True, required=False, default=None)
    reception_end = serializers.DateTimeField(allow_null=True, required=False, default=None)
    reception_end_mode = serializers.ChoiceField(
        choices=[m.value for m in ReceptionEndMode], default=ReceptionEndMode.MANUAL.value
    )
    reception_end_minutes = serializers.IntegerField(min_value=0, default=0)


class PerformanceInputSerializer(serializers.Serializer):
    start_time = serializers.DateTimeField()
    capacity = serializers.IntegerField(min_value=1)


class TicketTypeInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    advance_price = serializers.IntegerField(min_value=0)
    door_price = serializers.IntegerField(min_value=0)
