"""Death record API routes, prefixed with /api/death-records/"""

from django.urls import path

from .views import DeathRecordDetailView, DeathRecordView

app_name = 'mortality'

urlpatterns = [
    path('<uuid:record_id>/', DeathRecordDetailView.as_view(), name='death-record-detail'),
    path('', DeathRecordView.as_view(), name='death-records'),
]
