# ============================================================================
# src/medicine_scan/config/vision_config.py
# ============================================================================
"""
Vision & Summary Model Configuration
- OpenAI-compatible endpoint and API key
- Model names and sampling temperature
- Per-call and overall timeouts
- Image size limit
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VisionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    NEBIUS_API_KEY: str = Field(
        default="",
        description="API key for the hosted model endpoint"
    )
    NEBIUS_API_ENDPOINT: str = Field(
        default="https://api.studio.nebius.com/v1",
        description="OpenAI-compatible base URL"
    )
    VISION_MODEL: str = Field(
        default="Qwen/Qwen2-VL-7B-Instruct",
        description="Vision-language model that transcribes packaging photos"
    )
    SUMMARY_MODEL: str = Field(
        default="meta-llama/Meta-Llama-3.1-8B-Instruct",
        description="Text model that writes the benefits/precautions summary"
    )
    MODEL_TEMPERATURE: float = Field(
        default=0.2,
        ge=0.0, le=2.0,
        description="Sampling temperature for both models"
    )
    ENABLE_SUMMARY: bool = Field(
        default=True,
        description="Ask the summary model for benefits and precautions"
    )
    MODEL_CALL_TIMEOUT: float = Field(
        default=20.0,
        gt=0,
        description="Timeout for a single model call (seconds)"
    )
    PROCESS_TIMEOUT: float = Field(
        default=25.0,
        gt=0,
        description="Budget for the whole scan, all model calls included (seconds)"
    )
    MAX_IMAGE_SIZE: int = Field(
        default=5242880,
        gt=0,
        description="Largest accepted decoded image (bytes)"
    )

    @model_validator(mode="after")
    def check_timeouts(self):
        if self.PROCESS_TIMEOUT <= self.MODEL_CALL_TIMEOUT:
            raise ValueError("PROCESS_TIMEOUT must be greater than MODEL_CALL_TIMEOUT")
        return self

    @property
    def is_configured(self) -> bool:
        return bool(self.NEBIUS_API_KEY and self.NEBIUS_API_ENDPOINT)


vision_settings = VisionSettings()
