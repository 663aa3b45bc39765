from .base import Base, utcnow  # noqa: F401
from . import models  # noqa: F401  # регистрирует модели в metadata
