"""
URL configuration for core project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include

from flock_management.event_urls import flock_timeline_urlpatterns

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/batches/', include('flock_management.urls')),  # Batch registry
    path('api/batch-events/', include('flock_management.event_urls')),  # Batch event timeline
    path('api/death-records/', include('flock_management.mortality_urls')),  # Mortality ledger
    path('api/flock-events/', include((flock_timeline_urlpatterns, 'flock_timeline'))),  # Flock-level timeline
    path('api/expenses/', include('expenses.urls')),  # Expense ledger
]
