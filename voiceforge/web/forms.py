"""Inbound form reading for the generate-voice endpoint.

Responsibilities:
- Read `text`, `voice`, and `audioFile` from multipart or URL-encoded bodies.
- Leave the body unparsed when the declared encoding is not a form, so the
  validator can reject it.
- Report unparseable form bodies as `MalformedForm` (400).
"""

from __future__ import annotations

import sys

from fastapi import Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from ..errors import MalformedForm
from ..models.datatypes import AudioSample, FormSubmission
from ..synthesis.validation import is_form_encoding

# `text` is unbounded; only the audio sample has a size limit, checked by the validator.
_MAX_FIELD_BYTES = sys.maxsize


def _text_field(value: object) -> str | None:
    """Return a form value when it is a plain text field."""

    if isinstance(value, str):
        return value
    return None


async def _read_sample(value: object) -> AudioSample | None:
    """Read an uploaded sample; an empty unnamed part counts as no upload."""

    # Starlette's base class: form parts are not `fastapi.UploadFile` instances.
    if not isinstance(value, UploadFile):
        return None
    data = await value.read()
    if not data and not value.filename:
        return None
    return AudioSample(
        filename=value.filename or "",
        content_type=value.content_type,
        data=data,
    )


async def read_submission(request: Request) -> FormSubmission:
    """Build a `FormSubmission` from an inbound request.

    Raises:
        MalformedForm: The body declares a form encoding but cannot be parsed.
    """

    content_type = request.headers.get("content-type")
    if not is_form_encoding(content_type):
        return FormSubmission(content_type=content_type)

    try:
        async with request.form(max_part_size=_MAX_FIELD_BYTES) as form:
            return FormSubmission(
                content_type=content_type,
                text=_text_field(form.get("text")),
                voice=_text_field(form.get("voice")),
                audio_sample=await _read_sample(form.get("audioFile")),
            )
    except MultiPartException as exc:
        raise MalformedForm(exc.message) from exc
    except HTTPException as exc:
        raise MalformedForm(str(exc.detail)) from exc
