import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

_TRUE = {"1", "true", "yes", "on"}


def _split(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 4000
    db_path: str = "data/db.json"
    store_adapter: str = "json"       # json | memory
    vision_adapter: str = "mock"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    client_dist: str = "client/dist"
    check_offer_item: bool = False    # reject offers whose itemId is unknown
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Read settings from env (default: os.environ after loading .env)."""
        if env is None:
            load_dotenv(override=False)
            env = os.environ
        d = cls()
        return cls(
            host=env.get("HOST", d.host),
            port=int(env.get("PORT", d.port)),
            db_path=env.get("DB_PATH", d.db_path),
            store_adapter=env.get("STORE_ADAPTER", d.store_adapter).lower(),
            vision_adapter=env.get("VISION_ADAPTER", d.vision_adapter).lower(),
            cors_origins=_split(env.get("CORS_ORIGINS", "*")) or ["*"],
            client_dist=env.get("CLIENT_DIST", d.client_dist),
            check_offer_item=env.get("CHECK_OFFER_ITEM", "").strip().lower() in _TRUE,
            log_level=env.get("LOG_LEVEL", d.log_level),
        )
