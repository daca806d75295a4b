"""
WSGI config for the solestore project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "solestore.settings")

application = get_wsgi_application()
