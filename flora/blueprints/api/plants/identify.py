"""
Plant Identification
====================

POST /plants/identify accepts either a multipart upload (field ``image``) or a
JSON body ``{"image_data": "<base64 or data: URL>", "mime_type": "image/jpeg"}``.

While the model is working, rotating status texts are pushed to the caller's
Socket.IO room on the ``/analysis`` namespace.
"""
from __future__ import annotations

import base64
import logging

from flask import Response, request
from pydantic import ValidationError

from . import plants_api
from flora.blueprints.api._common import (
    current_session_id as _current_session_id,
    fail as _fail,
    get_emitter_service as _emitter,
    get_json as _get_json,
    get_plant_session_service as _session_service,
    success as _success,
    validation_details as _validation_details,
)
from flora.schemas import IdentifyPlantRequest
from flora.utils.http import safe_route

logger = logging.getLogger("plants_api.identify")


def _read_image() -> tuple[str, str] | Response:
    """Return ``(base64_data, mime_type)`` from the request, or an error response."""
    upload = request.files.get("image")
    if upload is not None:
        raw = upload.read()
        if not raw:
            return _fail("Uploaded image is empty", 400)
        mime_type = upload.mimetype or ""
        if not mime_type.startswith("image/"):
            return _fail("Uploaded file must be an image", 400)
        return base64.b64encode(raw).decode("ascii"), mime_type

    try:
        body = IdentifyPlantRequest(**_get_json())
        return body.resolved()
    except ValidationError as ve:
        return _fail("Invalid request", 400, details=_validation_details(ve))
    except ValueError as exc:
        return _fail(str(exc), 400)


@plants_api.post("/identify")
@safe_route("Failed to identify plant")
def identify_plant() -> Response:
    """
    Identify a plant from a photo and restart the care conversation.

    Returns:
        200 {"identified": true, "plant": {...}, "messages": [welcome], "state": "identified", ...}
        422 with the generic "couldn't identify" message; the session is untouched.
    """
    image = _read_image()
    if isinstance(image, Response):
        return image
    image_data, mime_type = image

    session_id = _current_session_id()
    service = _session_service()
    session = service.get_session(session_id)

    emitter = _emitter()
    on_progress = emitter.progress_callback(session_id) if emitter is not None else None

    logger.info("Identifying plant for session %s (%s)", session_id, mime_type)
    result = service.identify_plant(session, image_data, mime_type, on_progress=on_progress)

    if not result.ok:
        return _fail(
            result.message,
            422,
            details={"failure": result.failure_kind, "state": session.state.value},
        )
    return _success(result.to_dict())
