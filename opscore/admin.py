"""
Django admin registrations.

Archived records and audit events are shown read-only; the admin is for
inspection, not for editing snapshots.
"""
from django.contrib import admin

from .models import (
    Appointment,
    ArchivedRecord,
    AuditEvent,
    LabOrder,
    Patient,
    Prescription,
    Tenant,
    TimeLog,
    User,
    WorkShift,
)


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ('name', 'kind', 'status', 'created_at')
    list_filter = ('kind', 'status')
    search_fields = ('name',)

    def get_readonly_fields(self, request, obj=None):
        return ('kind',) if obj else ()


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'username', 'role', 'tenant', 'is_active')
    list_filter = ('role', 'tenant')
    search_fields = ('email', 'username', 'first_name', 'last_name')
    exclude = ('password',)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('mrn', 'first_name', 'last_name', 'tenant', 'updated_at')
    list_filter = ('tenant',)
    search_fields = ('mrn', 'first_name', 'last_name')


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('prescription_number', 'medication_name', 'patient', 'tenant', 'updated_at')
    search_fields = ('prescription_number', 'medication_name')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'scheduled_at', 'tenant', 'updated_at')


@admin.register(LabOrder)
class LabOrderAdmin(admin.ModelAdmin):
    list_display = ('order_number', 'test_name', 'patient', 'tenant', 'updated_at')
    search_fields = ('order_number', 'test_name')


@admin.register(WorkShift)
class WorkShiftAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'tenant', 'shift_type', 'status', 'start_time', 'end_time', 'archive_status')
    list_filter = ('status', 'archive_status', 'shift_type', 'tenant')
    search_fields = ('user__email',)


@admin.register(ArchivedRecord)
class ArchivedRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'record_type', 'record_id', 'patient_mrn', 'work_shift', 'archived_at', 'access_count')
    list_filter = ('record_type', 'tenant')
    search_fields = ('patient_mrn', 'patient_name')

    def has_change_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False


@admin.register(TimeLog)
class TimeLogAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'tenant', 'clock_in_time', 'clock_out_time', 'total_hours', 'status')
    list_filter = ('status', 'tenant')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'tenant', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
    search_fields = ('object_id',)

    def has_change_permission(self, request, obj=None):
        return False
