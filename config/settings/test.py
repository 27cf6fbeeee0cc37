"""Test settings.

SQLite on a file (not in memory) so thread-based concurrency tests share
one database; IMMEDIATE transactions make concurrent writers queue on the
database lock like they queue on the venue row lock in PostgreSQL.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'test-db.sqlite3',
        'OPTIONS': {
            'transaction_mode': 'IMMEDIATE',
            'timeout': 20,
        },
        'TEST': {
            'NAME': BASE_DIR / 'test-db.sqlite3',
        },
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

BOOKING_BUSY_BACKOFF_SECONDS = 0
BOOKING_ALLOW_PAST_START = False

LOGGING['loggers']['apps']['level'] = 'WARNING'
LOGGING['loggers']['shared']['level'] = 'WARNING'
