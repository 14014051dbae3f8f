"""
WSGI config for FRITOLAY Delivery project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'fritolay_core.settings')

application = get_wsgi_application()
