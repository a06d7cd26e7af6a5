"""POST /v1/projection - Cashflow projection endpoints"""

import time
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from cashflow_gateway.api.v1.schemas import (
    EstimatedProjectionRequest,
    EstimatedProjectionResponse,
    EstimatedTodaySchema,
    ErrorResponse,
    ProjectionRequest,
    ProjectionResponse,
)
from cashflow_gateway.api.dependencies import get_request_id, get_settings
from cashflow_gateway.config import Settings
from cashflow_gateway.domain.estimate import estimate_today_balance, rebase_projection
from cashflow_gateway.domain.exceptions import CashflowValidationError
from cashflow_gateway.domain.projection import calculate_cashflow
from cashflow_gateway.infrastructure.observability.logging import log_projection
from cashflow_gateway.infrastructure.observability.metrics import record_projection, record_validation_error

router = APIRouter()

VALIDATION_RESPONSES = {422: {"model": ErrorResponse, "description": "Invalid projection input"}}


def validation_error_response(error: CashflowValidationError, request_id: str) -> JSONResponse:
    record_validation_error(error.code.value)
    logging.warning(f"Invalid projection input: {error}", extra={"request_id": request_id, "code": error.code.value})
    return JSONResponse(status_code=422, content=error.to_dict())


@router.post("/projection", response_model=ProjectionResponse, responses=VALIDATION_RESPONSES)
def create_projection(
    request_body: ProjectionRequest,
    request: Request,
    config: Settings = Depends(get_settings),
):
    """
    Project daily balances for the household.

    Flow:
    1. Convert request body into domain entities
    2. Validate and project (optimistic + pessimistic scenarios)
    3. Record metrics and logs
    4. Return the projection
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        projection = calculate_cashflow(request_body.to_domain(), config)
    except CashflowValidationError as e:
        return validation_error_response(e, request_id)

    duration_ms = (time.time() - start_time) * 1000
    record_projection(projection)
    log_projection(
        request_id,
        len(projection.days),
        projection.optimistic.danger_day_count,
        projection.pessimistic.danger_day_count,
        duration_ms,
    )

    return ProjectionResponse.model_validate(projection, from_attributes=True)


@router.post(
    "/projection/estimated",
    response_model=EstimatedProjectionResponse,
    responses=VALIDATION_RESPONSES,
)
def create_estimated_projection(
    request_body: EstimatedProjectionRequest,
    request: Request,
    config: Settings = Depends(get_settings),
):
    """
    Estimate today's balance from the last checking balance update, then
    project forward from it.

    start_date is ignored: the projection always starts today.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    projection_days = request_body.projection_days
    if projection_days is None:
        projection_days = config.default_projection_days

    try:
        data = request_body.to_domain()
        estimate = estimate_today_balance(data, request_body.timezone, config)
        projection = rebase_projection(data, estimate, projection_days, config)
    except CashflowValidationError as e:
        return validation_error_response(e, request_id)

    duration_ms = (time.time() - start_time) * 1000
    record_projection(projection)
    log_projection(
        request_id,
        len(projection.days),
        projection.optimistic.danger_day_count,
        projection.pessimistic.danger_day_count,
        duration_ms,
    )

    return EstimatedProjectionResponse(
        estimate=EstimatedTodaySchema.model_validate(estimate, from_attributes=True),
        projection=ProjectionResponse.model_validate(projection, from_attributes=True),
    )
