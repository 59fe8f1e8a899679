"""
Connection settings for DB-API data sources.
"""

from enum import Enum

from pydantic import BaseModel, Field, SecretStr


class ProductTypeEnum(str, Enum):
    """Supported DB-API backends (postgres, mysql, trino)."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    TRINO = "trino"


_DEFAULT_PORTS = {
    ProductTypeEnum.POSTGRES: 5432,
    ProductTypeEnum.MYSQL: 3306,
    ProductTypeEnum.TRINO: 8080,
}


class DataSource(BaseModel):
    """Where and how to connect. ``database`` is the Trino catalog for Trino."""

    product_type: ProductTypeEnum
    host: str = Field(max_length=255)
    port: int | None = None
    database: str = Field(max_length=255)
    username: str = Field(max_length=255)
    password: SecretStr = SecretStr("")
    use_ssl: bool = Field(
        default=False,
        description="For Trino: use HTTPS (http_scheme='https'). When True, password is required.",
    )
    trino_schema: str = "default"

    @property
    def resolved_port(self) -> int:
        return self.port or _DEFAULT_PORTS[self.product_type]

    @property
    def key(self) -> str:
        """Identifies the server/database/user combination, e.g. for log messages."""
        return f"{self.product_type.value}://{self.username}@{self.host}:{self.resolved_port}/{self.database}"
