"""
Django settings for FRITOLAY Delivery project.
Back office and courier API over Supabase

Configured for:
- Supabase (base de datos, auth y almacenamiento alojados)
- Django REST Framework (API admin + API mobile repartidor)
"""

from pathlib import Path
from decouple import config, Csv

# ===========================================
# BASE CONFIGURATION
# ===========================================
BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = config('SECRET_KEY', default='dev-secret-key-change-in-production')
DEBUG = config('DEBUG', default=True, cast=bool)
ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1,0.0.0.0', cast=Csv())

# ===========================================
# APPLICATION DEFINITION
# ===========================================
INSTALLED_APPS = [
    # Django Core
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.staticfiles',

    # Third Party
    'rest_framework',
    'corsheaders',
    'drf_spectacular',

    # FRITOLAY Apps
    'core.apps.CoreConfig',
    'logistics.apps.LogisticsConfig',
    'courier.apps.CourierConfig',      # Courier mobile API
    'fleet.apps.FleetConfig',          # Courier management (admin)
    'catalog.apps.CatalogConfig',      # Products (admin)
    'reports.apps.ReportsConfig',      # Dashboard metrics & reports
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'fritolay_core.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
            ],
        },
    },
]

WSGI_APPLICATION = 'fritolay_core.wsgi.application'

# ===========================================
# DATABASE
# ===========================================
# Business data lives in Supabase. The local database only backs
# Django's own contrib apps.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': config('LOCAL_DB_PATH', default=str(BASE_DIR / 'local.sqlite3')),
    }
}

# ===========================================
# INTERNATIONALIZATION (Perú)
# ===========================================
LANGUAGE_CODE = 'es-pe'
TIME_ZONE = config('TIME_ZONE', default='America/Lima')
USE_I18N = True
USE_TZ = True

# ===========================================
# STATIC FILES
# ===========================================
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ===========================================
# SUPABASE (hosted database, auth & storage)
# ===========================================
SUPABASE_URL = config('SUPABASE_URL', default='')
SUPABASE_ANON_KEY = config('SUPABASE_ANON_KEY', default='')
SUPABASE_SERVICE_ROLE_KEY = config('SUPABASE_SERVICE_ROLE_KEY', default='')
SUPABASE_POSTGREST_TIMEOUT = config('SUPABASE_POSTGREST_TIMEOUT', default=10, cast=int)
SUPABASE_STORAGE_TIMEOUT = config('SUPABASE_STORAGE_TIMEOUT', default=20, cast=int)

# Storage bucket and folder for proof-of-delivery photos
DELIVERY_PHOTOS_BUCKET = config('DELIVERY_PHOTOS_BUCKET', default='deliveries')
DELIVERY_PHOTOS_FOLDER = config('DELIVERY_PHOTOS_FOLDER', default='delivery-photos')

# ===========================================
# DJANGO REST FRAMEWORK
# ===========================================
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'core.authentication.SupabaseTokenAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'EXCEPTION_HANDLER': 'core.handlers.api_exception_handler',
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
}

# ===========================================
# API DOCUMENTATION (drf-spectacular)
# ===========================================
SPECTACULAR_SETTINGS = {
    'TITLE': 'FRITOLAY Delivery API',
    'DESCRIPTION': 'API del panel de administración y de la app de repartidores',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
}

# ===========================================
# CORS (Admin dashboard & mobile app origins)
# ===========================================
CORS_ALLOWED_ORIGINS = config(
    'CORS_ALLOWED_ORIGINS',
    default='http://localhost:3000,http://127.0.0.1:3000,http://localhost:8081',
    cast=Csv()
)
CORS_ALLOW_CREDENTIALS = True

# ===========================================
# BUSINESS RULES
# ===========================================
LOW_STOCK_THRESHOLD = config('LOW_STOCK_THRESHOLD', default=10, cast=int)          # unidades
COURIER_RECENT_ASSIGNMENTS = config('COURIER_RECENT_ASSIGNMENTS', default=5, cast=int)

# ===========================================
# LOGGING CONFIGURATION
# ===========================================
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': config('DJANGO_LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
        'httpx': {
            'handlers': ['console'],
            'level': config('HTTPX_LOG_LEVEL', default='WARNING'),
            'propagate': False,
        },
    },
}
