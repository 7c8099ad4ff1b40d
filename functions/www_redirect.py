"""Lambda@Edge viewer-request handler redirecting apex hosts to ``www.``."""

import logging

logger = logging.getLogger()
logger.setLevel(logging.INFO)

WWW_PREFIX = "www."


def handler(event, _context):
    request = event["Records"][0]["cf"]["request"]
    host = request["headers"]["host"][0]["value"]

    if host.startswith(WWW_PREFIX):
        return request

    location = f"https://{WWW_PREFIX}{host}{request['uri']}"
    if request.get("querystring"):
        location = f"{location}?{request['querystring']}"
    logger.info("Redirecting %s%s to %s", host, request["uri"], location)
    return {
        "status": "301",
        "statusDescription": "Moved Permanently",
        "headers": {
            "location": [{"key": "Location", "value": location}],
        },
    }
