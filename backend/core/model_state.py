import logging
import google.generativeai as genai
from .config import (
    GEMINI_API_KEY,
    LLM_ANALYSIS_MODEL as DEFAULT_ANALYSIS,
    LLM_EXTRACTION_MODEL as DEFAULT_EXTRACTION,
    LLM_ANALYSIS_MAX_TOKENS,
    LLM_EXTRACTION_MAX_TOKENS,
)

logger = logging.getLogger(__name__)


class ModelConfig:
    def __init__(self):
        self.config = {
            "analysis": DEFAULT_ANALYSIS,
            "extraction": DEFAULT_EXTRACTION,
        }
        self.max_tokens = {
            "analysis": LLM_ANALYSIS_MAX_TOKENS,
            "extraction": LLM_EXTRACTION_MAX_TOKENS,
        }
        self._custom_api_key: str | None = None

    def get_model(self, key: str) -> str:
        return self.config.get(key, DEFAULT_EXTRACTION)

    def get_max_tokens(self, key: str) -> int:
        return self.max_tokens.get(key, LLM_EXTRACTION_MAX_TOKENS)

    def set_model(self, key: str, value: str):
        if key in self.config:
            self.config[key] = value
            logger.debug(f"ModelConfig: Updated '{key}' to '{value}'")
        else:
            logger.warning(f"ModelConfig: Unknown key '{key}'")

    def get_all(self):
        return self.config.copy()

    def set_api_key(self, key: str | None):
        """Override the environment API key (empty clears the override)."""
        self._custom_api_key = key if key and key.strip() else None
        logger.debug(f"ModelConfig: API key {'configured' if self._custom_api_key else 'cleared'}")

    def get_api_key(self) -> str | None:
        """Get the API key. Custom key wins over GEMINI_API_KEY."""
        return self._custom_api_key or GEMINI_API_KEY

    def is_configured(self) -> bool:
        """Check if an API key is available."""
        return bool(self.get_api_key())

    def ensure_configured(self) -> bool:
        """Configure genai with current API key. Returns True if configured."""
        key = self.get_api_key()
        if key:
            genai.configure(api_key=key)
            return True
        return False


# Singleton instance
model_config = ModelConfig()
