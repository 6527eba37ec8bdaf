from typing import List, Optional, Union

from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    ENVIRONMENT_NAME: str = "Development"

    @property
    def is_production(self):
        return self.ENVIRONMENT_NAME == "Production"

    PROJECT_NAME: str = "copy-vault-api"
    API_V1_STR: str = "/api/v1"

    # BACKEND_CORS_ORIGINS is a JSON-formatted list of origins
    # e.g: '["http://localhost", "http://localhost:4200", "http://localhost:3000"]'
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # in-memory sqlite unless a real database is configured
    SQLALCHEMY_DATABASE_URI: str = "sqlite://"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "~/logs"

    # Seq log
    SEQ_SERVER_URL: Optional[str] = None
    SEQ_SERVER_API_KEY: Optional[str] = None

    # users vault share token
    SHARES_NAME: str = "UserVaultShares"
    SHARES_SYMBOL: str = "UVS"

    # contracts factory fee, base 1e18 percent (3e18 == 3%)
    DEFAULT_FEE_RATE: int = 3 * 10**18

    # spot adapter
    SPOT_POOL_FEE_BPS: int = 30
    SLIPPAGE_ALLOWANCE_MIN: int = 10**15  # 0.1%
    SLIPPAGE_ALLOWANCE_MAX: int = 3 * 10**17  # 30%

    # perpetuals adapter
    PERP_MAX_LEVERAGE: int = 50

    class Config:

        case_sensitive = True
        env_file = ".env"
        extra = "allow"


settings = Settings()
