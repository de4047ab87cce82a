import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

from cachewarmer.domain.fetch_outcome import FetchOutcome
from cachewarmer.services.fetch_classifier import FetchClassifier

logger = logging.getLogger(__name__)


class BatchExecutor:
    """Runs the fetch classifier over one batch, all URLs at once.

    The batch size is the only concurrency bound. Aggregation is left to the
    caller; this returns the outcomes sorted by URL.
    """

    def __init__(self, classifier: FetchClassifier):
        self.classifier = classifier

    def run_batch(self, urls: Sequence[str]) -> List[FetchOutcome]:
        if not urls:
            return []
        with ThreadPoolExecutor(max_workers=len(urls), thread_name_prefix="warm") as pool:
            outcomes = list(pool.map(self.classifier.fetch_one, urls))
        logger.debug("Batch of %s URLs settled", len(outcomes))
        return sorted(outcomes, key=lambda o: o.url)
