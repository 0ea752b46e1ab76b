"""
URL mappings for the hospital operations API.

Paths carry no trailing slash (``APPEND_SLASH`` is off).  Every route is
named after its view so tests and clients can ``reverse()`` them.
"""
from django.urls import path, include

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, me_view
from .views import (
    alerts, departments, displays, doctors, health, inventory, patients, prescriptions, theaters, tokens, users,
)


urlpatterns = [
    path('', include('django_prometheus.urls')),  # /metrics
    path('healthz', health.healthz, name='healthz'),

    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/me', me_view, name='me_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),

    # Staff
    path('api/doctors', doctors.doctors, name='doctors'),
    path('api/users', users.users, name='users'),
    path('api/users/stats', users.user_stats, name='user_stats'),
    path('api/users/<int:user_id>', users.user_detail, name='user_detail'),
    path('api/users/<int:user_id>/toggle-status', users.user_toggle_status, name='user_toggle_status'),

    # Departments
    path('api/departments', departments.departments, name='departments'),
    path('api/departments/stats', departments.department_stats_view, name='department_stats'),
    path('api/departments/options', departments.department_options_view, name='department_options'),
    path('api/departments/<int:department_id>', departments.department_detail, name='department_detail'),

    # Patients
    path('api/patients', patients.patients, name='patients'),
    path('api/patients/<int:patient_id>', patients.patient_detail, name='patient_detail'),
    path('api/patients/<int:patient_id>/vitals', patients.patient_vitals, name='patient_vitals'),

    # Operating theaters and surgeries
    path('api/theaters', theaters.theaters, name='theaters'),
    path('api/theaters/check-conflict', theaters.check_conflict, name='theater_check_conflict'),
    path('api/theaters/<str:theater_id>', theaters.theater_detail, name='theater_detail'),
    path('api/surgeries', theaters.surgery_list, name='surgery_list'),
    path('api/surgeries/schedule', theaters.schedule_surgery, name='schedule_surgery'),
    path('api/surgeries/<int:booking_id>/cancel', theaters.surgery_cancel, name='surgery_cancel'),
    path('api/ot/board', theaters.board, name='ot_board'),
    path('api/ot/stats', theaters.stats, name='ot_stats'),

    # Emergency
    path('api/alerts', alerts.alerts, name='alerts'),
    path('api/alerts/<int:alert_id>', alerts.alert_detail, name='alert_detail'),
    path('api/alerts/<int:alert_id>/resolve', alerts.alert_resolve, name='alert_resolve'),
    path('api/emergency/cases', alerts.emergency_case, name='emergency_case'),
    path('api/emergency/queue', alerts.emergency_queue, name='emergency_queue'),

    # Token queue
    path('api/tokens', tokens.tokens, name='tokens'),
    path('api/tokens/stats', tokens.token_stats, name='token_stats'),
    path('api/tokens/<int:token_id>', tokens.token_detail, name='token_detail'),
    path('api/tokens/<int:token_id>/status', tokens.token_update_status, name='token_update_status'),
    path('api/tokens/<int:token_id>/cancel', tokens.token_cancel, name='token_cancel'),
    path('api/tokens/board/<int:department_id>', tokens.department_token_board, name='department_token_board'),

    # Inventory
    path('api/drugs', inventory.drugs, name='drugs'),
    path('api/drugs/<int:drug_id>', inventory.drug_detail, name='drug_detail'),
    path('api/blood-bank', inventory.blood_units, name='blood_units'),
    path('api/blood-bank/stats', inventory.blood_bank_stats, name='blood_bank_stats'),
    path('api/blood-bank/<int:unit_id>', inventory.blood_unit_detail, name='blood_unit_detail'),

    # Prescriptions
    path('api/prescriptions', prescriptions.prescriptions, name='prescriptions'),
    path('api/prescriptions/<int:prescription_id>/process', prescriptions.prescription_process,
         name='prescription_process'),
    path('api/prescriptions/<int:prescription_id>/complete', prescriptions.prescription_complete,
         name='prescription_complete'),
    path('api/pharmacy/stats', prescriptions.pharmacy_stats, name='pharmacy_stats'),

    # Displays
    path('api/displays', displays.displays, name='displays'),
    path('api/displays/heartbeat', displays.heartbeat, name='display_heartbeat'),
    path('api/displays/<int:display_id>', displays.display_detail, name='display_detail'),
    path('api/displays/<int:display_id>/data', displays.display_data, name='display_data'),
]
