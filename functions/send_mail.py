"""
Contact-form handler: turns a form POST into a mail sent through SES.

Invoked by an API Gateway HTTP API (payload format 2.0). The body is JSON with
``name``, ``email`` and ``message``, possibly base64-encoded by the API.
"""

import base64
import binascii
import json
import logging
import os
from typing import Dict

import boto3
from botocore.exceptions import ClientError, ParamValidationError

logger = logging.getLogger()
logger.setLevel(logging.INFO)

MAIL_RECIPIENT = os.environ.get("MAIL_RECIPIENT", "")
MAIL_SENDER = os.environ.get("MAIL_SENDER", "")
ALLOWED_ORIGIN = os.environ.get("ALLOWED_ORIGIN", "*")
CHARSET = "UTF-8"
FORM_FIELDS = ("name", "email", "message")

ses = boto3.client("ses", region_name=os.environ.get("AWS_REGION", "eu-central-1"))


def handler(event, _context):
    try:
        form = _decode_body(event)
    except ValueError as exc:
        logger.warning("Rejected form request: %s", exc)
        return _response(400, {"message": "Invalid form data"})

    logger.info("Form request from %s", form.get("email"))
    try:
        response = ses.send_email(**_email_request(form))
    except (ClientError, ParamValidationError) as exc:
        logger.exception("Failed to send email")
        return _response(500, {"message": "Failed to send email", "error": str(exc)})

    return _response(
        200,
        {"message": "Email sent successfully", "messageId": response.get("MessageId")},
    )


def _decode_body(event: Dict) -> Dict[str, str]:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ValueError("body is not valid base64 UTF-8") from exc
    try:
        form = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ValueError("body is not valid JSON") from exc
    if not isinstance(form, dict):
        raise ValueError("body is not a JSON object")
    for field in FORM_FIELDS:
        if not isinstance(form.get(field, ""), str):
            raise ValueError(f"field {field} is not a string")
    return form


def _email_request(form: Dict[str, str]) -> Dict:
    name = form.get("name", "")
    email = form.get("email", "")
    text = f"Name: {name}\nEmail: {email}\n\nMessage: {form.get('message', '')}"
    request = {
        "Destination": {"ToAddresses": [MAIL_RECIPIENT]},
        "Message": {
            "Body": {"Text": {"Data": text, "Charset": CHARSET}},
            "Subject": {"Data": f"Order from {name}", "Charset": CHARSET},
        },
        "Source": MAIL_SENDER,
    }
    if email:
        request["ReplyToAddresses"] = [email]
    return request


def _response(status: int, body: Dict) -> Dict:
    return {
        "statusCode": status,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": ALLOWED_ORIGIN,
            "Access-Control-Allow-Headers": "*",
            "Access-Control-Allow-Methods": "OPTIONS,POST",
        },
        "body": json.dumps(body),
    }
