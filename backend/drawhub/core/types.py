"""Column types and value helpers shared by the models"""
from datetime import datetime, timezone
from sqlalchemy import TypeDecorator, String
import uuid


def generate_uuid() -> str:
    """New primary key value"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class GUID(TypeDecorator):
    """UUID stored as VARCHAR(36) on every backend (SQLite in tests, PostgreSQL in prod)"""
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        return str(value) if value is not None else None

    def process_result_value(self, value, dialect):
        return str(value) if value is not None else None
