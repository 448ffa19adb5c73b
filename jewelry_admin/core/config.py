from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ADMIN_API_KEY = "ja-admin-dev-key"
DEFAULT_MANAGER_API_KEY = "ja-manager-dev-key"
DEFAULT_SALESPERSON_API_KEY = "ja-salesperson-dev-key"
DEFAULT_SUPPORT_API_KEY = "ja-support-dev-key"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="JA_", extra="ignore")

    app_name: str = "Jewelry Admin API"
    env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    database_url: str = "sqlite+pysqlite:///./jewelry_admin.db"

    auth_enabled: bool = True
    admin_api_key: str = DEFAULT_ADMIN_API_KEY
    manager_api_key: str = DEFAULT_MANAGER_API_KEY
    salesperson_api_key: str = DEFAULT_SALESPERSON_API_KEY
    support_api_key: str = DEFAULT_SUPPORT_API_KEY
    admin_actor_id: str = "admin-001"
    manager_actor_id: str = "manager-001"
    salesperson_actor_id: str = "salesperson-001"
    support_actor_id: str = "support-001"

    order_number_prefix: str = "ORD"
    enforce_stock_check: bool = Field(
        default=False,
        description="Reject order items whose quantity exceeds the product's current stock",
    )

    def model_post_init(self, __context) -> None:
        if self.env.lower() == "dev":
            return

        insecure_items: list[str] = []
        if self.admin_api_key == DEFAULT_ADMIN_API_KEY:
            insecure_items.append("JA_ADMIN_API_KEY")
        if self.manager_api_key == DEFAULT_MANAGER_API_KEY:
            insecure_items.append("JA_MANAGER_API_KEY")
        if self.salesperson_api_key == DEFAULT_SALESPERSON_API_KEY:
            insecure_items.append("JA_SALESPERSON_API_KEY")
        if self.support_api_key == DEFAULT_SUPPORT_API_KEY:
            insecure_items.append("JA_SUPPORT_API_KEY")

        if insecure_items:
            raise ValueError(
                "insecure default api keys are not allowed outside dev mode; set env vars: "
                + ", ".join(sorted(insecure_items))
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
