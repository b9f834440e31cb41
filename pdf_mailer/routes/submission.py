# pdf_mailer/routes/submission.py
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from pdf_mailer.exceptions import SubmissionValidationError
from pdf_mailer.schemas.submission import (
    SubmissionErrorResponse,
    SubmissionFailureResponse,
    SubmissionSuccessResponse,
)
from pdf_mailer.services.submission_service import SubmissionService

router = APIRouter(
    prefix="/api",
    tags=["Form Submission"]
)

SUCCESS_MESSAGE = "Form submitted, PDF generated, and email sent successfully!"
FAILURE_MESSAGE = "Server error during submission processing."
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_submission_service(request: Request) -> SubmissionService:
    return request.app.state.submission_service


async def read_submission_payload(request: Request) -> Any:
    """Read the request body as a JSON object or as form fields."""
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        # file parts are not submission fields
        return {key: value for key, value in form.items() if isinstance(value, str)}

    if not await request.body():
        return None
    try:
        return await request.json()
    except ValueError:
        raise SubmissionValidationError([{"field": "body", "msg": "Request body must be valid JSON."}])


@router.post(
    "/submit-form",
    response_model=SubmissionSuccessResponse,
    responses={
        400: {"model": SubmissionErrorResponse},
        500: {"model": SubmissionFailureResponse},
    },
)
async def submit_form(
    request: Request,
    service: SubmissionService = Depends(get_submission_service),
):
    try:
        payload = await read_submission_payload(request)
    except SubmissionValidationError as e:
        return JSONResponse(status_code=400, content={"errors": e.errors})

    outcome = await service.submit(payload)

    if outcome.ok:
        return {"message": SUCCESS_MESSAGE}

    if isinstance(outcome.error, SubmissionValidationError):
        return JSONResponse(status_code=400, content={"errors": outcome.error.errors})

    return JSONResponse(
        status_code=500,
        content={"message": FAILURE_MESSAGE, "error": str(outcome.error)},
    )
