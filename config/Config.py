# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-14
# Description: Config
# -----------------------------------------------------------------------------

import os
from dataclasses import dataclass
from dotenv import load_dotenv, find_dotenv

# Load .env once globally
load_dotenv(find_dotenv(usecwd=True), override=False)


@dataclass(frozen=True)
class Config:
    # Sparse inference service
    inference_endpoint: str
    inference_api_key: str = ""

    # Chroma (cloud when an api key is set, http when only an endpoint is set,
    # otherwise a local persistent client under chroma_path)
    chroma_endpoint: str = ""
    chroma_api_key: str = ""
    chroma_tenant: str = ""
    chroma_database: str = ""
    chroma_path: str = ""

    # ---- Single source of truth: field_name -> ENV VAR NAME ----
    ENV_VARS = {
        "inference_endpoint": "RVI_INFERENCE_ENDPOINT",
        "inference_api_key": "RVI_INFERENCE_API_KEY",

        "chroma_endpoint": "CHROMA_ENDPOINT",
        "chroma_api_key": "CHROMA_API_KEY",
        "chroma_tenant": "CHROMA_TENANT",
        "chroma_database": "CHROMA_DATABASE",
        "chroma_path": "CHROMA_PATH",
    }

    REQUIRED_FIELDS = ("inference_endpoint",)

    # Groups for use in tests / health checks
    CHROMA_CLOUD_ENV_VARS = (
        "CHROMA_API_KEY",
        "CHROMA_TENANT",
        "CHROMA_DATABASE",
    )

    @staticmethod
    def from_env() -> "Config":
        """Build Config object from environment variables."""
        kwargs = {
            field_name: os.getenv(env_name, "").strip()
            for field_name, env_name in Config.ENV_VARS.items()
        }
        return Config(**kwargs)

    def __post_init__(self):
        """Fail fast if any required config is missing."""
        missing_fields = [f for f in self.REQUIRED_FIELDS if not getattr(self, f)]

        if missing_fields:
            missing_env_vars = [self.ENV_VARS[f] for f in missing_fields]
            raise ValueError(f"Missing required environment variables: {missing_env_vars}")

        if self.chroma_api_key and not (self.chroma_tenant and self.chroma_database):
            raise ValueError(
                "CHROMA_API_KEY is set but CHROMA_TENANT / CHROMA_DATABASE are missing"
            )

    @property
    def chroma_mode(self) -> str:
        if self.chroma_api_key:
            return "cloud"
        if self.chroma_endpoint:
            return "http"
        return "persistent"

    def summary(self) -> dict:
        """Return a safe, non-sensitive summary for logging."""
        return {
            "inference_endpoint": self.inference_endpoint,
            "chroma_mode": self.chroma_mode,
            "chroma_endpoint": self.chroma_endpoint,
            "chroma_tenant": self.chroma_tenant,
            "chroma_database": self.chroma_database,
            "chroma_path": self.chroma_path,
        }
