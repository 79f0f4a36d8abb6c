from typing import List, Optional, Type

from beanie import Document, init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ServerSelectionTimeoutError

from studylib.configs.settings import settings
from studylib.utils.logging import get_logger

logger = get_logger(__name__)


class MongoDB:
    """Motor client and Beanie registration for the folder and file collections"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None

    async def connect(self, document_models: Optional[List[Type[Document]]] = None) -> None:
        self.client = AsyncIOMotorClient(
            settings.MONGO_URL,
            serverSelectionTimeoutMS=8000,
            connectTimeoutMS=8000,
            socketTimeoutMS=10000,
            maxPoolSize=50,
        )
        try:
            hello = await self.client.admin.command("hello")
        except ServerSelectionTimeoutError as e:
            logger.error(f"[MONGO] Server selection timed out for {settings.MONGO_URL}: {e}")
            raise ConnectionError("Cannot connect to MongoDB server")

        # Multi-document transactions only exist on replica sets and sharded clusters
        if settings.MONGO_USE_TRANSACTIONS and not (hello.get("setName") or hello.get("msg") == "isdbgrid"):
            raise ConnectionError("MONGO_USE_TRANSACTIONS is set but MongoDB is a standalone server")

        self.database = self.client[settings.MONGO_DB]
        if document_models:
            await init_beanie(database=self.database, document_models=document_models)
            logger.info(f"[MONGO] Beanie initialized on '{settings.MONGO_DB}' with {len(document_models)} models")

    async def disconnect(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None
            self.database = None
            logger.info("[MONGO] Disconnected")


mongodb = MongoDB()
