from django.contrib import admin

from ticketing.models import (
    CheckinLog,
    Performance,
    Production,
    Reservation,
    ReservationTicket,
    TicketType,
)


class PerformanceInline(admin.TabularInline):
    model = Performance
    extra = 1


class TicketTypeInline(admin.TabularInline):
    model = TicketType
    extra = 1


class ReservationTicketInline(admin.TabularInline):
    model = ReservationTicket
    extra = 0


@admin.register(Production)
class ProductionAdmin(admin.ModelAdmin):
    list_display = ["title", "reception_status", "reception_end_mode", "updated_at"]
    search_fields = ["title"]
    inlines = [PerformanceInline, TicketTypeInline]


@admin.register(Performance)
class PerformanceAdmin(admin.ModelAdmin):
    list_display = ["production", "start_time", "capacity"]
    list_filter = ["production"]


@admin.register(TicketType)
class TicketTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "production", "advance_price", "door_price", "is_public"]
    list_filter = ["production"]


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = [
        "customer_name",
        "performance",
        "status",
        "checkin_status",
        "payment_status",
        "created_at",
    ]
    list_filter = ["status", "source", "performance__production"]
    search_fields = ["customer_name", "customer_name_kana", "customer_email"]
    inlines = [ReservationTicketInline]


@admin.register(CheckinLog)
class CheckinLogAdmin(admin.ModelAdmin):
    list_display = ["reservation", "type", "count", "created_at"]
    list_filter = ["type"]
    readonly_fields = ["reservation", "type", "count", "payment_info", "created_at"]

    def has_add_permission(self, request):
        return False
