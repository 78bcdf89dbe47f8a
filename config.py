from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env.local", env_file_encoding="utf-8", extra="ignore")

    # Firebase
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None
    FIREBASE_CREDENTIALS_JSON_STRING: Optional[str] = None

    # Firestore collections
    ITEMS_COLLECTION: str = "items"
    STORES_COLLECTION: str = "storeRequests"  # approved store requests double as the store registry
    APPROVED_STORE_STATUS: str = "approved"

    # Search
    SEARCH_RESULT_LIMIT: int = 20
    DISTANCE_DEADBAND_KM: float = 0.001
    STORE_ID_PREFIXES: str = "virtual_,temp_"  # priority order, comma separated
    MAX_SEARCH_QUERY_LENGTH: int = 200

    # Logging
    LOG_JSON: bool = False
    LOG_DIR: str = "logs"

    # CORS
    CORS_ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000,https://localhost:3000"

    @property
    def store_id_prefixes(self) -> List[str]:
        return [p.strip() for p in self.STORE_ID_PREFIXES.split(",") if p.strip()]

    @property
    def cors_allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]


settings = Settings()
