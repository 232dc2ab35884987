from flask import jsonify
import logging

from core.notifications import format_timestamp

logger = logging.getLogger(__name__)


def _json_number(value):
    # nan is not valid JSON
    if value is None or value != value:
        return None
    return value


class WebRoutes:
    """Class untuk mengelola web routes (health check dan status sensor)"""

    def __init__(self, config, monitor_instance):
        self.config = config
        self.monitor = monitor_instance

    def register_routes(self, app):
        """Register semua routes ke Flask app"""

        @app.route("/keepalive")
        def keepalive():
            return {"status": "alive", "timestamp": self.config.format_local_time()}

        @app.route("/status")
        def status():
            snapshot = self.monitor.status_snapshot()
            if snapshot is None:
                return jsonify({"status": "no_data"}), 404

            return jsonify({
                "status": "ok",
                "temperature": _json_number(snapshot.temperature),
                "humidity": _json_number(snapshot.humidity),
                "as_of": format_timestamp(snapshot.as_of),
                "threshold": self.monitor.config_store.config.temp_threshold,
            })
