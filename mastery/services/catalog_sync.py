"""
Catalog sync driver.
Pages through the remote catalog and replaces the local copy batch by batch.
"""

import time
from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from .. import config
from ..errors import ConsistencyError, NetworkError, ProtocolError, ValidationError
from ..models import CatalogEntry
from ..schemas import SyncReport
from .catalog_client import CatalogClient
from .catalog_store import CatalogStore, entry_from_item


class CatalogSyncService:
    """
    Runs one catalog sync.

    Pages are fetched strictly one at a time with a fixed delay between
    fetches. A page that fails at the transport level is retried at the same
    offset a bounded number of times; a protocol error aborts immediately.
    Batches written before an abort stay in the catalog.
    """

    def __init__(
        self,
        db: Session,
        client: Optional[CatalogClient] = None,
        page_size: int = None,
        page_delay: float = None,
        max_offset: int = None,
        max_retries: int = None,
        retry_delay: float = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = CatalogStore(db)
        self.client = client or CatalogClient()
        self.page_size = config.CATALOG_PAGE_SIZE if page_size is None else page_size
        self.page_delay = config.CATALOG_PAGE_DELAY if page_delay is None else page_delay
        self.max_offset = config.CATALOG_MAX_OFFSET if max_offset is None else max_offset
        self.max_retries = config.CATALOG_MAX_RETRIES if max_retries is None else max_retries
        self.retry_delay = config.CATALOG_RETRY_DELAY if retry_delay is None else retry_delay
        self.sleep = sleep

        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")

    def run(self) -> SyncReport:
        """Run a full sync and report what happened. Never raises pipeline errors."""
        report = SyncReport()
        logger.info(f"Starting catalog sync (page_size={self.page_size}, max_offset={self.max_offset})")

        batch: List[CatalogEntry] = []
        try:
            self.store.clear()
            offset = 0

            while True:
                items = self._fetch_with_retry(offset, report)
                report.pages_fetched += 1

                if not items:
                    logger.info("No more problems found, sync complete")
                    break

                batch = self._build_entries(items, offset, report)
                report.succeeded += self.store.append_batch(batch)
                batch = []
                logger.info(f"Page at offset {offset}: {len(items)} items (total: {report.succeeded})")

                offset += self.page_size
                report.last_offset = offset

                # Safety break to prevent infinite loops
                if offset > self.max_offset:
                    report.truncated = True
                    report.reason = f"Reached safety limit at offset {offset}"
                    logger.warning(f"Reached safety limit of {self.max_offset}, stopping sync")
                    break

                self.sleep(self.page_delay)

        except ConsistencyError as e:
            report.failed += len(batch)
            logger.error(f"Catalog sync aborted: {e}")
            report.fail(e)
        except (NetworkError, ProtocolError) as e:
            logger.error(f"Catalog sync aborted: {e}")
            report.fail(e)

        report.settle()
        logger.info(
            f"Catalog sync {report.status.value}: {report.succeeded} written, "
            f"{report.skipped} skipped, {report.pages_fetched} pages"
        )
        return report

    def _fetch_with_retry(self, offset: int, report: SyncReport) -> List[Dict[str, Any]]:
        """Fetch a page, retrying transport failures at the same offset."""
        attempt = 0
        while True:
            try:
                return self.client.fetch_page(self.page_size, offset)
            except NetworkError as e:
                attempt += 1
                if attempt > self.max_retries:
                    raise NetworkError(
                        f"Giving up on offset {offset} after {self.max_retries} retries: {e}", offset
                    ) from e
                report.retries += 1
                logger.warning(f"Attempt {attempt}: {e}")
                self.sleep(max(self.page_delay, self.retry_delay * attempt))

    def _build_entries(self, items: List[Dict[str, Any]], offset: int, report: SyncReport) -> List[CatalogEntry]:
        entries = []
        for index, item in enumerate(items):
            try:
                entries.append(entry_from_item(item, sequence_id=offset + index + 1))
            except ValidationError as e:
                report.skipped += 1
                logger.warning(f"Skipping catalog item: {e}")
        return entries
