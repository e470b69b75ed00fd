"""WSGI config for the passdesk project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "passdesk.settings")

application = get_wsgi_application()
