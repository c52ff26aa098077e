from contextlib import asynccontextmanager
from fastapi import FastAPI
from persona_studio.core.client_config import credential_status, load_environment
from persona_studio.core.credential_store import CredentialStore
import logging

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events - startup and shutdown."""
    # Startup
    logger.info("🚀 Starting Persona Studio API...")

    load_environment()

    # The store is shared; keys are still resolved on every request
    app.state.credential_store = CredentialStore()
    logger.info(f"🔑 Credential store at {app.state.credential_store.path}")

    status = credential_status(app.state.credential_store)
    if status["configured"]:
        logger.info(f"✅ API key available (source: {status['source']})")
    else:
        logger.warning("⚠️ No API key configured yet; register one via PUT /api/v1/credentials")

    logger.info("🎉 Application startup completed successfully")

    yield

    # Shutdown
    logger.info("🛑 Shutting down Persona Studio API...")
