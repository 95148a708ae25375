"""WSGI config for the cPOP backend."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "cpop.settings")

application = get_wsgi_application()
