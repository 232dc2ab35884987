from .base_task import BackgroundTask
from .keepalive_task import KeepaliveTask

__all__ = [
    'BackgroundTask',
    'KeepaliveTask'
]
