"""Column types that behave the same on PostgreSQL and SQLite"""

import uuid

from sqlalchemy import String, TypeDecorator


class GUID(TypeDecorator):
    """UUID column: native UUID on PostgreSQL, 36-char string elsewhere."""
    impl = String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            from sqlalchemy.dialects.postgresql import UUID
            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == 'postgresql':
            return value
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


UUIDType = GUID(36)
