"""Cross-cutting infrastructure: logging, paths, config, scheduling, shutdown."""

from .logging_utils import get_module_logger, StructuredLogger
from .logging_config import configure_logging
from .scheduler import AsyncioScheduler, Scheduler, cancel_quietly
from .screen import PlacementPolicy, ScreenBounds, detect_work_area
from .shutdown_coordinator import ShutdownCoordinator, get_shutdown_coordinator

__all__ = [
    'AsyncioScheduler',
    'PlacementPolicy',
    'Scheduler',
    'ScreenBounds',
    'ShutdownCoordinator',
    'StructuredLogger',
    'cancel_quietly',
    'configure_logging',
    'detect_work_area',
    'get_module_logger',
    'get_shutdown_coordinator',
]
