"""
WSGI config for the gastro marketplace.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gastro.config.settings')

application = get_wsgi_application()
