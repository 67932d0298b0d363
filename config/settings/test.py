"""
Test settings: in-memory database, captured email, throwaway upload directory
"""
import tempfile
from pathlib import Path

from .base import *  # noqa: F401,F403
from .base import REST_FRAMEWORK, STOREFRONT

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
EMAIL_RECEIVER = 'owner@example.com'
DEFAULT_FROM_EMAIL = 'no-reply@example.com'

MEDIA_ROOT = Path(tempfile.mkdtemp(prefix='storefront-uploads-'))

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    'DEFAULT_THROTTLE_CLASSES': [],
}

STOREFRONT = {**STOREFRONT, 'REPRICE_FROM_CATALOG': True}
