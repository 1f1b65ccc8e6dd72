import logging

from flask import Flask, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest
from prometheus_client.registry import CollectorRegistry

log = logging.getLogger(__name__)

INDEX_HTML = """<html>
<head><title>Mirth Exporter</title></head>
<body>
<h1>Mirth Exporter</h1>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""


def create_app(metrics_path: str = "/metrics", registry: CollectorRegistry = REGISTRY) -> Flask:
    app = Flask(__name__)

    def index():
        return Response(INDEX_HTML.format(metrics_path=metrics_path), mimetype='text/html')

    def metrics():
        # Each request runs a full collection, including one mccommand call.
        output = generate_latest(registry)
        return Response(output, headers={'Content-Type': CONTENT_TYPE_LATEST})

    app.add_url_rule(metrics_path, 'metrics', metrics)
    if metrics_path != '/':
        app.add_url_rule('/', 'index', index)
    else:
        log.warning("Metrics served on '/', index page disabled.")

    return app
