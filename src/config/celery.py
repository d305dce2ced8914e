"""
Celery application for the orders API.

``DJANGO_SETTINGS_MODULE`` is set before the app is instantiated so the
worker reads the ``CELERY_``-prefixed Django settings.  Task families:
notification delivery and the outbox relay (run by beat).
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("storefront_orders")

app.config_from_object("django.conf:settings", namespace="CELERY")

# Picks up ``tasks.py`` from every installed module (notifications.tasks).
app.autodiscover_tasks()
