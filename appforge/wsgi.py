"""WSGI entry point for AppForge."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "appforge.settings.dev")

application = get_wsgi_application()
