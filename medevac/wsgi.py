"""
WSGI config for the medevac project.

It exposes the WSGI callable as a module-level variable named ``application``.
WebSocket events are only served by the ASGI entrypoint (``medevac.asgi``);
a WSGI deployment still publishes events through the channel layer.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'medevac.settings')

application = get_wsgi_application()
