"""
Django admin registrations for the clinic models.

Lets superusers inspect and correct data through ``/admin/``: stuck
theater rows, mistyped stock levels or a token left in the wrong status.
"""

from django.contrib import admin

from .models import (
    Appointment,
    BloodUnit,
    Department,
    Display,
    Drug,
    EmergencyAlert,
    Patient,
    Prescription,
    PrescriptionItem,
    SurgeryBooking,
    Theater,
    Token,
    TokenTransition,
    User,
)


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'status', 'capacity', 'current_occupancy', 'created_at')
    list_filter = ('status',)
    search_fields = ('name', 'location')


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'department', 'status', 'is_staff', 'is_superuser')
    list_filter = ('role', 'status', 'department')
    search_fields = ('username', 'first_name', 'last_name', 'email')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'age', 'gender', 'condition', 'status', 'department', 'created_at')
    list_filter = ('status', 'department')
    search_fields = ('name', 'phone', 'condition')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'date', 'type', 'status')
    list_filter = ('type', 'status')


@admin.register(Theater)
class TheaterAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'status', 'patient_name', 'procedure', 'start_time', 'estimated_end')
    list_filter = ('status',)


@admin.register(SurgeryBooking)
class SurgeryBookingAdmin(admin.ModelAdmin):
    list_display = ('id', 'theater', 'patient', 'procedure', 'surgeon_names', 'start_time', 'end_time', 'status')
    list_filter = ('status', 'theater')
    search_fields = ('procedure', 'patient__name', 'surgeon_names')


@admin.register(EmergencyAlert)
class EmergencyAlertAdmin(admin.ModelAdmin):
    list_display = ('id', 'code_type', 'location', 'priority', 'status', 'created_at', 'resolved_at')
    list_filter = ('status', 'priority', 'code_type')


@admin.register(Token)
class TokenAdmin(admin.ModelAdmin):
    list_display = ('token_number', 'patient_name', 'department_name', 'priority', 'status', 'created_at')
    list_filter = ('status', 'priority', 'department')
    search_fields = ('token_number', 'patient_name')


@admin.register(TokenTransition)
class TokenTransitionAdmin(admin.ModelAdmin):
    list_display = ('token', 'from_status', 'to_status', 'operator', 'timestamp')


@admin.register(Drug)
class DrugAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'current_stock', 'min_stock', 'expiry_date')
    search_fields = ('name', 'batch_number')


class PrescriptionItemInline(admin.TabularInline):
    model = PrescriptionItem
    extra = 0


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('patient__name',)
    inlines = [PrescriptionItemInline]


@admin.register(BloodUnit)
class BloodUnitAdmin(admin.ModelAdmin):
    list_display = ('blood_type', 'units_available', 'critical_level', 'status', 'expiry_date')
    list_filter = ('blood_type', 'status')


@admin.register(Display)
class DisplayAdmin(admin.ModelAdmin):
    list_display = ('id', 'location', 'content', 'status', 'is_active', 'last_update')
    list_filter = ('content', 'status', 'is_active')
