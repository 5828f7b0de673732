"""
Django admin registrations for the care models, so staff can inspect and
fix data through ``/admin/``.
"""

from django.contrib import admin

from .models import Appointment, AuditEvent, Employee, Medication, Notification, Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'full_name', 'phone', 'date_of_birth', 'user')
    search_fields = ('full_name', 'phone', 'user__username')


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ('id', 'full_name', 'department', 'user')
    search_fields = ('full_name', 'department', 'user__username')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'subject', 'date', 'patient', 'employee', 'is_confirmed')
    list_filter = ('is_confirmed',)
    search_fields = ('subject', 'patient__full_name', 'employee__full_name')


@admin.register(Medication)
class MedicationAdmin(admin.ModelAdmin):
    list_display = ('id', 'medicine_name', 'dosage', 'patient', 'start_date', 'end_date')
    search_fields = ('medicine_name', 'name', 'patient__full_name')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'recipient', 'type', 'title', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
