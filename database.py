"""
MongoDB access for the forms service.

`db` is None when DATABASE_URL or DATABASE_NAME is not configured; callers
treat that as "no durable storage" and keep working from memory.
"""

import os
import logging

from pymongo import MongoClient

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

# Collection names
FORM_SUBMISSIONS = "formsubmission"

db = None
if DATABASE_URL and DATABASE_NAME:
    try:
        # MongoClient connects lazily, so this never blocks startup
        _client = MongoClient(DATABASE_URL, serverSelectionTimeoutMS=5000)
        db = _client[DATABASE_NAME]
    except Exception as e:
        logger.error("Could not configure MongoDB client: %s", e)
        db = None


def get_collection(name: str):
    """Return the named collection, or None when no database is configured."""
    if db is None:
        return None
    return db[name]
