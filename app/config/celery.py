"""
Celery configuration for the chat service.

Redis is both the message broker and result backend. Tasks are
auto-discovered from installed apps; the chat app registers
chat.tasks.purge_attachment_blobs, which retries blob deletions that failed
while a chat was being deleted.

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
