"""
Django settings for campusdocs.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-campusdocs-dev-key')

DEBUG = os.environ.get('DJANGO_DEBUG', 'True') == 'True'

ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'docgen',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'Asia/Kolkata'
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Document generation
CAMPUSDOCS_INSTITUTION_NAME = os.environ.get(
    'CAMPUSDOCS_INSTITUTION_NAME', 'MEENAKSHI SUNDARARAJAN ENGINEERING COLLEGE'
)
CAMPUSDOCS_INSTITUTION_LINES = (
    '(AN AUTONOMOUS INSTITUTION AFFILIATED TO ANNA UNIVERSITY)',
    '363, ARCOT ROAD, KODAMBAKKAM, CHENNAI-600024',
)
CAMPUSDOCS_LOGO_PATH = os.environ.get('CAMPUSDOCS_LOGO_PATH', str(BASE_DIR / 'static' / 'images' / 'logo.png'))
CAMPUSDOCS_PDF_CACHE_TTL = int(os.environ.get('CAMPUSDOCS_PDF_CACHE_TTL', 5 * 60))
CAMPUSDOCS_PDF_CACHE_MAX_ENTRIES = int(os.environ.get('CAMPUSDOCS_PDF_CACHE_MAX_ENTRIES', 50))
CAMPUSDOCS_IMAGE_DPI = 150
CAMPUSDOCS_IMAGE_QUALITY = 90

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {message}',
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
        'level': 'WARNING',
    },
    'loggers': {
        'docgen': {
            'handlers': ['console'],
            'level': os.environ.get('CAMPUSDOCS_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        'reports': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
