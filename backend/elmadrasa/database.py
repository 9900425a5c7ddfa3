"""
Database connection - MongoDB async client (Motor).
"""

from motor.motor_asyncio import AsyncIOMotorClient

from elmadrasa.config import MONGO_URL, DB_NAME

# Motor connects lazily, so importing this module never touches the network
client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]
