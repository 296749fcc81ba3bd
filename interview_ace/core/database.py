import logging
import time
from typing import Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from interview_ace.core.config import settings

logger = logging.getLogger(__name__)

SESSIONS_COLLECTION = "sessions"


def create_database_connection(uri: Optional[str] = None, max_retries: int = 3, retry_delay: float = 2) -> MongoClient:
    """Connect to MongoDB, pinging before handing the client out.

    Retries with a doubling delay; the last failure is re-raised.
    """
    uri = uri or settings.MONGO_URI

    for attempt in range(1, max_retries + 1):
        client = MongoClient(uri, serverSelectionTimeoutMS=5000, connectTimeoutMS=10000, maxPoolSize=10)
        try:
            client.admin.command("ping")
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            client.close()
            logger.error(f"❌ [DB] Session store connection attempt {attempt}/{max_retries} failed: {e}")
            if attempt == max_retries:
                logger.critical("💥 [DB] Session store unreachable, giving up")
                raise
            logger.info(f"🔁 [DB] Retrying in {retry_delay}s")
            time.sleep(retry_delay)
            retry_delay *= 2
        else:
            logger.info(f"✅ [DB] Connected to session store '{settings.MONGO_DATABASE}'")
            return client


def get_sessions_collection(client: MongoClient) -> Collection:
    """One document per client key"""
    collection = client[settings.MONGO_DATABASE][SESSIONS_COLLECTION]
    collection.create_index([("client_key", ASCENDING)], unique=True)
    return collection
