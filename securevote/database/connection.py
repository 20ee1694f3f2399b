# securevote/database/connection.py
import logging
from datetime import datetime, timezone

from fastapi import Request
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import ConfigurationError, DuplicateKeyError

from securevote import config

logger = logging.getLogger(__name__)

SETTINGS_ID = "election"
VOTER_STATS_ID = "stats"


class ElectionStore:
    """Handle over the election collections.

    One instance is created per application and passed to request handlers;
    nothing in the package keeps collection objects at module level.
    """

    def __init__(self, db: Database, client: MongoClient = None):
        self.client = client
        self.db = db
        self.candidates = db[config.CANDIDATES_COLLECTION_NAME]
        self.votes = db[config.VOTES_COLLECTION_NAME]
        self.settings = db[config.SETTINGS_COLLECTION_NAME]
        self.voters = db[config.VOTERS_COLLECTION_NAME]
        self.receipts = db[config.RECEIPTS_COLLECTION_NAME]

    @classmethod
    def connect(cls, uri: str = None, db_name: str = None) -> "ElectionStore":
        """
        Open a MongoDB connection and verify the server is reachable.

        Args:
            uri: Connection string; defaults to MONGODB_URI
            db_name: Database to use when the URI has no database path

        Returns:
            A ready ElectionStore

        Raises:
            pymongo.errors.PyMongoError: if the server cannot be reached
        """
        uri = uri or config.MONGODB_URI
        client = MongoClient(
            uri,
            serverSelectionTimeoutMS=config.SERVER_SELECTION_TIMEOUT_MS,
            socketTimeoutMS=config.SOCKET_TIMEOUT_MS,
        )
        try:
            db = client.get_default_database()
        except ConfigurationError:
            db = client[db_name or config.MONGO_DB_NAME]

        try:
            client.server_info()
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            client.close()
            raise
        logger.info(f"Connected to MongoDB, database: {db.name}")

        store = cls(db, client)
        store.ensure_indexes()
        return store

    def ensure_indexes(self):
        # At most one counter per candidate, one receipt per voter per institution
        self.votes.create_index("candidateId", unique=True)
        self.receipts.create_index(
            [("universityId", ASCENDING), ("voterId", ASCENDING)], unique=True
        )
        self.candidates.create_index("university")

    def ping(self) -> bool:
        try:
            self.db.command("ping")
            return True
        except Exception as e:
            logger.error(f"MongoDB ping failed: {e}")
            return False

    def seed_defaults(self, candidates=None, settings=None, total_registered: int = None):
        """Insert default settings, voter stats and demo candidates when absent."""
        self.settings.update_one(
            {"_id": SETTINGS_ID},
            {"$setOnInsert": dict(settings or config.DEFAULT_SETTINGS)},
            upsert=True,
        )

        if total_registered is None:
            total_registered = config.TOTAL_REGISTERED_VOTERS
        try:
            self.voters.insert_one({
                "_id": VOTER_STATS_ID,
                "totalRegistered": total_registered,
                "lastUpdated": datetime.now(timezone.utc),
            })
            logger.info(f"Created voter statistics record ({total_registered} registered)")
        except DuplicateKeyError:
            pass

        if self.candidates.find_one({}) is None:
            if candidates is None:
                candidates = config.DEFAULT_CANDIDATES
            seeds = [dict(c) for c in candidates]
            if seeds:
                result = self.candidates.insert_many(seeds)
                for inserted_id in result.inserted_ids:
                    self.votes.insert_one({"candidateId": str(inserted_id), "count": 0})
                logger.info(f"Seeded {len(seeds)} default candidates")

    def close(self):
        """Close MongoDB connection"""
        if self.client is None:
            return
        try:
            self.client.close()
            logger.info("MongoDB connection closed")
        except Exception as e:
            logger.error(f"Error closing MongoDB connection: {e}")


def get_store(request: Request) -> ElectionStore:
    """FastAPI dependency returning the application's store handle."""
    return request.app.state.store
