"""
WSGI config for supply_order project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'supply_order.settings.local')

application = get_wsgi_application()
