from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from config import MONGODB_URL, DATABASE_NAME, MONGODB_TIMEOUT_MS

# 集合名
SESSIONS = "sessions"
USER_SETTINGS = "user_settings"


def ensure_indexes(db: Database) -> None:
    """创建索引"""
    db[SESSIONS].create_index([("user_id", ASCENDING), ("started_at", DESCENDING)])
    db[USER_SETTINGS].create_index("user_key", unique=True)


def connect(url: str = MONGODB_URL, name: str = DATABASE_NAME) -> Database:
    client = MongoClient(url, serverSelectionTimeoutMS=MONGODB_TIMEOUT_MS, tz_aware=True)
    return client[name]
