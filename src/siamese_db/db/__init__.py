from siamese_db.db.base import KeyValueStore, Mode, Transaction
from siamese_db.db.factory import SUPPORTED_BACKENDS, get_store

__all__ = ["KeyValueStore", "Mode", "Transaction", "SUPPORTED_BACKENDS", "get_store"]
