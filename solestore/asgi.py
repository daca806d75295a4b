"""
ASGI config for the solestore project.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "solestore.settings")

application = get_asgi_application()
