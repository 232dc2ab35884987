import threading
import logging

logger = logging.getLogger(__name__)


class BackgroundTask:
    """Base class untuk periodic background tasks (satu thread per task)"""

    def __init__(self, interval, name="BackgroundTask"):
        self.interval = interval
        self.name = name
        self.thread = None
        self._stop_event = threading.Event()

    @property
    def is_running(self):
        return self.thread is not None and not self._stop_event.is_set()

    def task(self):
        """Method yang harus di-override oleh subclass"""
        raise NotImplementedError

    def run_once(self):
        """Run a single iteration; errors are logged, never raised"""
        try:
            self.task()
        except Exception as e:
            logger.error(f"Error in {self.name}: {e}")

    def run(self):
        """Main loop: run, then wait for the interval or a stop request"""
        while not self._stop_event.is_set():
            self.run_once()
            if self._stop_event.wait(max(self.interval, 0)):
                break

    def start(self):
        """Start the background task in a separate thread"""
        self._stop_event.clear()
        self.thread = threading.Thread(target=self.run, daemon=True, name=self.name)
        self.thread.start()
        logger.info(f"{self.name} started (interval {self.interval}s)")

    def stop(self):
        """Stop the background task"""
        self._stop_event.set()
        if self.thread:
            self.thread.join(timeout=5)
            self.thread = None
