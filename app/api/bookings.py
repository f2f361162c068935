import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.errors import InvalidPayload, PayloadTooLarge
from app.core.logger import logger
from app.models.api_models import BookingCreatedResponse, ErrorResponse, SuccessResponse
from app.services.booking_service import BookingService, get_booking_service

router = APIRouter()


async def read_body(request: Request, limit: int = None) -> bytes:
    """
    Reads the request body chunk by chunk and gives up as soon as it grows
    past the limit, so nothing unbounded is buffered.
    """
    limit = limit or settings.MAX_BODY_BYTES

    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(limit)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise PayloadTooLarge(limit)
    return bytes(body)


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_json(body: bytes) -> Any:
    """
    Strict JSON decoding: NaN/Infinity are refused and nesting too deep to
    decode counts as malformed. Raises ValueError in both cases.
    """
    try:
        return json.loads(body, parse_constant=_reject_constant)
    except RecursionError:
        raise ValueError("JSON nested too deeply")


def parse_booking_id(value: Any) -> Optional[int]:
    """Integer id from a query string or JSON value, None if it isn't one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


@router.post(
    "/book",
    response_model=BookingCreatedResponse,
    responses={400: {"model": ErrorResponse}},
)
async def create_booking(
    request: Request,
    service: BookingService = Depends(get_booking_service),
):
    body = await read_body(request)
    try:
        payload = parse_json(body)
    except ValueError as e:
        raise InvalidPayload(f"Body is not JSON: {e}")

    booking = await run_in_threadpool(service.create, payload)
    return BookingCreatedResponse(id=booking["id"])


@router.get("/bookings")
async def list_bookings(service: BookingService = Depends(get_booking_service)):
    return await run_in_threadpool(service.list)


@router.api_route(
    "/delete",
    methods=["GET", "POST"],
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_booking(
    request: Request,
    id: Optional[str] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    booking_id = parse_booking_id(id)

    # A JSON body may override the query parameter; anything unusable is ignored
    if request.method == "POST":
        body = await read_body(request)
        try:
            data = parse_json(body)
        except ValueError:
            logger.debug("Delete body is not JSON, using query parameter")
            data = None
        if isinstance(data, dict):
            body_id = parse_booking_id(data.get("id"))
            if body_id is not None:
                booking_id = body_id

    await run_in_threadpool(service.delete, booking_id)
    return SuccessResponse()
