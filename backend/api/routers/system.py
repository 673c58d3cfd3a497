"""
System router - Health checks and model configuration.
"""

import logging

from fastapi import APIRouter

from api.schemas import ModelConfigUpdate
from core.model_state import model_config

logger = logging.getLogger(__name__)

# Configure Gemini at startup if API key available
model_config.ensure_configured()

router = APIRouter()


@router.get("/health")
def health_check():
    """Health check endpoint - publicly accessible."""
    return {
        "status": "ok",
        "service": "Content Engine Ingestion Backend",
        "llm_configured": model_config.is_configured(),
    }


@router.get("/config/models")
def get_model_config():
    """Get current LLM model configuration."""
    return model_config.get_all()


@router.post("/config/models")
def update_model_config(config: ModelConfigUpdate):
    """Update LLM model configuration."""
    if config.analysis:
        model_config.set_model("analysis", config.analysis)
    if config.extraction:
        model_config.set_model("extraction", config.extraction)
    logger.info(f"Model configuration updated: {model_config.get_all()}")
    return {"status": "updated", "config": model_config.get_all()}
