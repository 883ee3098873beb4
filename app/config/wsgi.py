"""
WSGI config for the chat service.

The service is served over ASGI (config/asgi.py) so WebSocket events work;
WSGI is kept for management tooling and plain HTTP deployments.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
