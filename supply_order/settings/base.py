"""
Base settings for supply_order project.
Shared between local, cloud and test configurations.
"""

from pathlib import Path
import os

from django.urls import reverse_lazy

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-r2v#0o8k!x5m@supply-order-dev-key-change-me')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv('DEBUG', 'True').lower() == 'true'

ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', '*').split(',')


# Application definition
INSTALLED_APPS = [
    "unfold",
    "unfold.contrib.filters",
    "unfold.contrib.forms",
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'corsheaders',
    'stock',
    'orders',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'supply_order.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'supply_order.wsgi.application'


# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]


# Internationalization
LANGUAGE_CODE = 'en-us'
# Report days are calendar days in this zone
TIME_ZONE = os.getenv('TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True


# Static files
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# CORS
CORS_ALLOW_ALL_ORIGINS = True


# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# =============================================================================
# STOCK LEDGER & REPORTS
# =============================================================================
STOCK_DEFAULT_LOW_STOCK_THRESHOLD = int(os.getenv('STOCK_DEFAULT_LOW_STOCK_THRESHOLD', '5'))

# availableDates reads limit * factor newest transactions
STOCK_REPORT_DATE_SCAN_FACTOR = int(os.getenv('STOCK_REPORT_DATE_SCAN_FACTOR', '10'))
STOCK_REPORT_CACHE_TIMEOUT = int(os.getenv('STOCK_REPORT_CACHE_TIMEOUT', '300'))

# Nightly rebuild of yesterday's summary (run_report_scheduler)
STOCK_REPORT_REBUILD_HOUR = int(os.getenv('STOCK_REPORT_REBUILD_HOUR', '0'))
STOCK_REPORT_REBUILD_MINUTE = int(os.getenv('STOCK_REPORT_REBUILD_MINUTE', '15'))


# Unfold Admin Configuration
UNFOLD = {
    "SITE_TITLE": "Supply Order Admin",
    "SITE_HEADER": "Supply Order",
    "SITE_URL": "/",
    "SITE_SYMBOL": "inventory",

    "SIDEBAR": {
        "show_search": True,
        "show_all_applications": True,
        "navigation": [
            {
                "title": "Dashboard",
                "separator": False,
                "items": [
                    {
                        "title": "Dashboard",
                        "icon": "dashboard",
                        "link": reverse_lazy("admin:index"),
                    },
                ],
            },
            {
                "title": "Orders",
                "separator": True,
                "items": [
                    {
                        "title": "Order List",
                        "icon": "shopping_cart",
                        "link": reverse_lazy("admin:orders_orderlistitem_changelist"),
                    },
                    {
                        "title": "Week Cycles",
                        "icon": "date_range",
                        "link": reverse_lazy("admin:orders_weekcycle_changelist"),
                    },
                ],
            },
            {
                "title": "Inventory",
                "separator": True,
                "items": [
                    {
                        "title": "Stock",
                        "icon": "inventory_2",
                        "link": reverse_lazy("admin:stock_stockitem_changelist"),
                    },
                    {
                        "title": "Transactions",
                        "icon": "receipt_long",
                        "link": reverse_lazy("admin:stock_stocktransaction_changelist"),
                    },
                    {
                        "title": "Daily Reports",
                        "icon": "summarize",
                        "link": reverse_lazy("admin:stock_dailyreportsummary_changelist"),
                    },
                ],
            },
        ],
    },
}

CSRF_TRUSTED_ORIGINS = [
    origin for origin in os.getenv('CSRF_TRUSTED_ORIGINS', '').split(',') if origin
]
