import os
import tempfile

os.environ.setdefault("SECRET_KEY", "test-secret-key")

from .settings import *  # noqa

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    **REST_FRAMEWORK.get("DEFAULT_THROTTLE_RATES", {}),
    "auth": "1000/minute",
    "public": "1000/minute",
}

TIME_ZONE = "America/Sao_Paulo"
MEDIA_ROOT = Path(tempfile.mkdtemp(prefix="distribuidora-uploads-"))
DELIVERY_FEE = Decimal("5.00")
CUSTOMER_LOGIN_REVEALS_UNREGISTERED = True
