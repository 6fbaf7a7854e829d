from healthcare_app.config import get_settings
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie

from healthcare_app.models import Appointment, User, AuditLog
from healthcare_app.utils.logger import get_logger

settings = get_settings()
logger = get_logger("database")

DOCUMENT_MODELS = [
    Appointment,
    User,
    AuditLog,
]

_mongo_client: AsyncIOMotorClient | None = None


async def init_db() -> None:
    """Initialize MongoDB (Beanie) and register document models."""
    global _mongo_client
    logger.info(f"Connecting to MongoDB at: {settings.MONGODB_HOST}:{settings.MONGODB_PORT}")
    logger.info(f"Database: {settings.mongodb_database}")
    logger.info(f"Using authentication: {settings.uses_auth}")
    client = AsyncIOMotorClient(settings.mongodb_uri)
    try:
        await bind_models(client[settings.mongodb_database])
    except Exception:
        client.close()
        raise
    # Only a client with bound models counts as connected for /health
    _mongo_client = client


async def bind_models(database) -> None:
    """Register every document model against an already opened database."""
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)


async def ping_db() -> bool:
    """Check MongoDB connectivity."""
    if not _mongo_client:
        return False
    try:
        await _mongo_client.admin.command("ping")
        return True
    except Exception as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return False


def close_db() -> None:
    global _mongo_client
    if _mongo_client:
        _mongo_client.close()
        _mongo_client = None
