"""
ASGI config for the gastro marketplace.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gastro.config.settings')

application = get_asgi_application()
