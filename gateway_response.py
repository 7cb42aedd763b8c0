import json
from typing import Any, Dict, Optional

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET",
    "Access-Control-Allow-Headers": "Origin, X-Requested-With, Content-Type, Accept",
}


def build_response(status_code: int, detail: Optional[str] = None) -> Dict[str, Any]:
    """
    Format a response for the API gateway.

    200 responses carry the detail as ``message``, every other status
    carries it as ``fault`` and must have one.
    """
    if not status_code:
        raise TypeError("build_response() expects at least argument status_code")
    if status_code != 200 and not detail:
        raise TypeError("build_response() expects arguments status_code and detail")

    body: Dict[str, Any] = {"statusCode": status_code}
    if status_code == 200:
        if detail:
            body["message"] = detail
    else:
        body["fault"] = detail

    return {
        "statusCode": status_code,
        "body": json.dumps(body),
        "headers": dict(CORS_HEADERS),
    }


def response_body(response: Dict[str, Any]) -> Dict[str, Any]:
    return json.loads(response["body"])
