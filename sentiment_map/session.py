from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from sentiment_map.aggregator import aggregate
from sentiment_map.controller import MAP_ERROR_MESSAGE, InteractionController
from sentiment_map.errors import LoadError, RenderError
from sentiment_map.loader import DatasetLoader
from sentiment_map.map_adapter import MapAdapter
from sentiment_map.scheduler import Scheduler
from sentiment_map.settings import DashboardSettings

logger = logging.getLogger(__name__)

MapFactory = Callable[[], MapAdapter]


class LoadStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class DashboardSession:
    """
    Page-level lifecycle: Loading -> Ready | Error.

    - reload() is the only way out of Error (no automatic retries)
    - each reload disposes the previous controller and map before building new ones
    - a map that fails to build leaves the session Ready with controller.map_error set
    """

    def __init__(
            self,
            loader: DatasetLoader,
            settings: DashboardSettings,
            map_factory: Optional[MapFactory] = None,
            scheduler: Optional[Scheduler] = None,
    ):
        self.loader = loader
        self.settings = settings
        self.map_factory = map_factory
        self.scheduler = scheduler

        self.status = LoadStatus.LOADING
        self.error: Optional[str] = None
        self.controller: Optional[InteractionController] = None
        self._lock = threading.Lock()

    def reload(self) -> LoadStatus:
        with self._lock:
            self.error = None
            self.status = LoadStatus.LOADING
            self._release()

            try:
                records = self.loader.load(self.settings.data_locator)
            except LoadError as e:
                self.status = LoadStatus.ERROR
                self.error = f"Failed to load data: {e}"
                logger.error("Data loading error: %s", e)
                return self.status

            controller = InteractionController(
                records,
                aggregate(records),
                scheduler=self.scheduler,
                hover_delay_sec=self.settings.hover_delay_sec,
                select_zoom_level=self.settings.select_zoom_level,
            )
            if self.map_factory is not None:
                self._attach_map(controller)

            self.controller = controller
            self.status = LoadStatus.READY
            logger.info(
                "Dashboard ready: countries=%s regions=%s",
                controller.country_count,
                controller.region_count,
            )
            return self.status

    def dispose(self) -> None:
        with self._lock:
            self._release()

    def _attach_map(self, controller: InteractionController) -> None:
        try:
            adapter = self.map_factory()
        except RenderError as e:
            logger.error("Map initialization error: %s", e)
            controller.map_error = MAP_ERROR_MESSAGE
            return
        controller.attach_map(adapter)

    def _release(self) -> None:
        if self.controller is not None:
            self.controller.dispose()
            self.controller = None
