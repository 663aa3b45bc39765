"""Alpha Factory: ролевые кабинеты, счета, платежи и уведомления."""

__version__ = "1.0.0"
