from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class Amount(TypeDecorator):
    """Arbitrary precision integer stored as its decimal string.

    On-chain amounts routinely exceed 64 bits (1000 tokens with 18 decimals), which sqlite
    INTEGER and most NUMERIC implementations cannot hold exactly.
    """

    impl = String(80)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(int(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
