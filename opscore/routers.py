"""
URL mappings for the operations API.

Trailing slashes are deliberately omitted; ``APPEND_SLASH`` is off.
"""
from django.urls import include, path

from .auth_views import login_view, me_view, patient_login_view
from .views import archive, health, platform, shifts, timelogs

urlpatterns = [
    # django_prometheus.urls serves /metrics
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/patient-login', patient_login_view, name='patient_login_view'),
    path('api/auth/me', me_view, name='me_view'),

    path('api/shifts', shifts.shifts, name='shifts'),
    path('api/shifts/active', shifts.active_shift, name='active_shift'),
    path('api/shifts/<int:shift_id>/end', shifts.end_shift, name='end_shift'),
    path('api/shifts/<int:shift_id>/archive/retry', shifts.retry_archive, name='retry_archive'),

    path('api/archived-records/search', archive.search_archived_records, name='search_archived_records'),
    path('api/archived-records/<int:record_id>', archive.archived_record_detail, name='archived_record_detail'),

    path('api/clock-in', timelogs.clock_in, name='clock_in'),
    path('api/clock-out', timelogs.clock_out, name='clock_out'),
    path('api/time-logs', timelogs.list_time_logs, name='list_time_logs'),
    path('api/time-logs/weekly-summary', timelogs.weekly_summary, name='weekly_summary'),
    path('api/time-logs/<int:log_id>/approve', timelogs.approve_time_log, name='approve_time_log'),
    path('api/time-logs/<int:log_id>/dispute', timelogs.dispute_time_log, name='dispute_time_log'),

    path('api/platform/tenants', platform.tenants, name='tenants'),
    path('api/platform/tenants/<uuid:tenant_id>', platform.tenant_detail, name='tenant_detail'),
]
