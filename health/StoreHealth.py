# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-20
# Description: StoreHealth
# -----------------------------------------------------------------------------
import logging
from typing import Optional

from utility.logging_utils import get_logger
from vectorstore.RecordStore import RecordStore


class StoreHealth:
    """
    Healthcheck for the storage engine.

    - ping():  connection / auth check
    - check(): ping + count the record collection
    """

    def __init__(self, store: RecordStore, collection_name: str, logger: Optional[logging.Logger] = None):
        self.store = store
        self.collection_name = collection_name
        self.logger = logger or get_logger(__name__)

    def ping(self) -> bool:
        ok = self.store.test_connection()
        self.logger.info("Store ping: %s", "ok" if ok else "unreachable")
        return ok

    def check(self) -> bool:
        if not self.ping():
            return False
        try:
            total = self.store.count(self.collection_name)
            self.logger.info("Collection '%s' holds %d record(s)", self.collection_name, total)
            return True
        except Exception as e:
            self.logger.exception("Counting collection '%s' failed: %s", self.collection_name, e)
            return False
