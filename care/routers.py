"""
URL mappings for the home-care API.

Paths are lower case and have no trailing slash;
``CaseInsensitiveApiPathMiddleware`` folds the SPA's ``/api/Appointment``
style paths onto them.
"""
from django.urls import path

from .views import appointments, auth, employees, health, medications, notifications, patients

urlpatterns = [
    path('healthz', health.healthz, name='healthz'),

    # Auth
    path('api/auth/register', auth.register_view, name='register_view'),
    path('api/auth/login', auth.login_view, name='login_view'),
    path('api/auth/logout', auth.logout_view, name='logout_view'),
    path('api/auth/me', auth.me_view, name='me_view'),

    # Appointments
    path('api/appointment', appointments.appointment_collection, name='appointment_collection'),
    path('api/appointment/patient/<int:patient_id>', appointments.appointments_for_patient, name='appointments_for_patient'),
    path('api/appointment/<int:pk>', appointments.appointment_detail, name='appointment_detail'),

    # Medications
    path('api/medication', medications.medication_collection, name='medication_collection'),
    path('api/medication/my', medications.my_medications, name='my_medications'),
    path('api/medication/patient/<int:patient_id>', medications.medications_for_patient, name='medications_for_patient'),
    path('api/medication/<int:pk>', medications.medication_detail, name='medication_detail'),

    # Patients
    path('api/patient', patients.list_patients, name='list_patients'),
    path('api/patient/user/<int:user_id>', patients.patient_by_user, name='patient_by_user'),
    path('api/patient/<int:pk>', patients.patient_detail, name='patient_detail'),

    # Employees
    path('api/employee', employees.list_employees, name='list_employees'),
    path('api/employee/user/<int:user_id>', employees.employee_by_user, name='employee_by_user'),
    path('api/employee/<int:pk>', employees.employee_detail, name='employee_detail'),

    # Notifications
    path('api/notification', notifications.list_notifications, name='list_notifications'),
    path('api/notification/unread', notifications.unread_notifications, name='unread_notifications'),
    path('api/notification/unread-count', notifications.unread_count, name='unread_count'),
    path('api/notification/mark-all-read', notifications.mark_all_read, name='mark_all_read'),
    path('api/notification/<int:pk>/mark-read', notifications.mark_read, name='mark_read'),
    path('api/notification/<int:pk>', notifications.delete_notification, name='delete_notification'),
]
