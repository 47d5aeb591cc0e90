"""Storage paths configuration model."""

from pydantic import BaseModel


class StorageConfig(BaseModel):
    """Configuration for on-disk state.

    Attributes:
        config_path: JSON file mirroring the LLM configuration
        upload_dir: Directory where uploaded photos are staged
    """

    config_path: str = "llm-config.json"
    upload_dir: str = "uploads"
