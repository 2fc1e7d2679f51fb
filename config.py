import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    classifier: str = "mock"
    classifier_seed: Optional[int] = None
    default_user_id: int = 1
    max_image_bytes: int = Field(16 * 1024 * 1024, gt=0)  # 16MB upload limit
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    port: int = 8000

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        load_dotenv(dotenv_path=env_file)

        seed = os.getenv("ECOWASTE_CLASSIFIER_SEED")
        origins = os.getenv("ECOWASTE_CORS_ORIGINS", "*")
        return cls(
            classifier=os.getenv("ECOWASTE_CLASSIFIER", "mock"),
            classifier_seed=int(seed) if seed else None,
            default_user_id=int(os.getenv("ECOWASTE_DEFAULT_USER_ID", 1)),
            max_image_bytes=int(os.getenv("ECOWASTE_MAX_IMAGE_BYTES", 16 * 1024 * 1024)),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=int(os.getenv("PORT", 8000)),
        )
