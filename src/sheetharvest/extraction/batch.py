"""Run extraction over many workbooks."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional, Union

from ..config import settings
from ..workbook.models import WorkbookReadError
from ..workbook.reader import WorkbookSnapshot
from .extractor import ExtractionContext, SpreadsheetExtractor
from .models import BatchResult, ExtractionResult, FileFailure

logger = logging.getLogger(__name__)


class BatchExtractor:
    """
    Extract a list of workbook files with one shared context.

    A file that cannot be read is recorded as a failure and the batch goes on.
    Results keep input order whatever the number of workers.
    """

    def __init__(self, context: ExtractionContext, workers: Optional[int] = None):
        self.extractor = SpreadsheetExtractor(context)
        self.workers = settings.batch_workers if workers is None else workers

    def extract_file(self, path: Union[str, Path]) -> ExtractionResult:
        """Load and extract a single workbook; WorkbookReadError propagates."""
        return self.extractor.extract(WorkbookSnapshot.load(path))

    def run(self, paths: Iterable[Union[str, Path]], workers: Optional[int] = None) -> BatchResult:
        paths = [Path(p) for p in paths]
        workers = self.workers if workers is None else workers

        if workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outcomes = list(pool.map(self._process, paths))
        else:
            outcomes = [self._process(path) for path in paths]

        batch = BatchResult()
        for outcome in outcomes:
            if isinstance(outcome, FileFailure):
                batch.failures.append(outcome)
            else:
                batch.results.append(outcome)

        logger.info(f"Batch finished: {len(batch.results)} extracted, {len(batch.failures)} failed")
        return batch

    def _process(self, path: Path) -> Union[ExtractionResult, FileFailure]:
        try:
            return self.extract_file(path)
        except WorkbookReadError as e:
            logger.error(f"Skipping unreadable workbook {path.name}: {e.reason}")
            return FileFailure(workbook=path.name, error=e.reason)
