"""
ASGI config for the hospital information system API.

Only plain HTTP is served; there are no WebSocket routes.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hmis.settings")

application = get_asgi_application()
