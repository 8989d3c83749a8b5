"""
Bakgrundskörning av ruttförfrågningar

Providern anropas i en trådpool. Färdiga resultat läggs i en trådsäker kö
som planeraren tömmer på sin egen kontext, så bara planeraren skriver till
sitt tillstånd.
"""

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import List, Optional

from models import Coordinate
from routing_providers import RoutingProvider, RouteRequestError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Resultat från en ruttförfrågan: antingen punkter eller ett fel"""
    request_id: int
    points: Optional[List[Coordinate]] = None
    error: Optional[RouteRequestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RouteFetcher:
    """Kör routing-providern utanför den interaktiva kontexten"""

    def __init__(self, provider: RoutingProvider, max_workers: int = 1):
        self.provider = provider
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="route-fetch"
        )
        self._completed: "queue.Queue[FetchResult]" = queue.Queue()
        self._futures: List[Future] = []
        self._closed = False

    def submit(self, request_id: int, start: Coordinate, end: Coordinate) -> Future:
        """Starta en hämtning. Resultatet hamnar i kön när den är klar."""
        if self._closed:
            raise RuntimeError("RouteFetcher är avstängd")

        future = self._executor.submit(self._run, request_id, start, end)
        self._futures.append(future)
        return future

    def _run(self, request_id: int, start: Coordinate, end: Coordinate) -> None:
        try:
            points = self.provider.get_route(start, end)
            result = FetchResult(request_id=request_id, points=list(points))
        except RouteRequestError as e:
            result = FetchResult(request_id=request_id, error=e)
        except Exception as e:
            # Okända fel från providern behandlas som transportfel
            logger.exception("Oväntat fel i routing-provider")
            result = FetchResult(request_id=request_id, error=RouteRequestError(str(e)))
        self._completed.put(result)

    def drain(self) -> List[FetchResult]:
        """Returnera alla färdiga resultat i den ordning de blev klara"""
        results = []
        while True:
            try:
                results.append(self._completed.get_nowait())
            except queue.Empty:
                return results

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Vänta tills allt inskickat arbete är klart. True om inget återstår."""
        pending = [f for f in self._futures if not f.done()]
        if pending:
            wait(pending, timeout=timeout)
        self._futures = [f for f in self._futures if not f.done()]
        return not self._futures

    def shutdown(self) -> None:
        self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)
