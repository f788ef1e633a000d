"""WSGI entry point.

Each request runs on its own worker thread; the storage backend and
database connections are the only shared resources.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'server.settings')

application = get_wsgi_application()
