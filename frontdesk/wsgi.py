"""
WSGI config for the front desk project.

Exposes the WSGI callable as ``application``.  The live queue WebSocket
needs the ASGI entrypoint in ``frontdesk.asgi`` instead.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'frontdesk.settings')

application = get_wsgi_application()
