"""
Routes reached only after the acceptance gate has validated the request.

The gate leaves its result on ``request.state.eventgrid`` and the resolved
topic on ``request.state.topic``; these handlers never re-read the body.
"""
from fastapi import APIRouter, Request, Response
from .schemas import SubscriptionValidationResponse
from ..services.delivery import DeliveryService
from ..validation import PipelineResult

router = APIRouter()


@router.post("/api/events", status_code=200)
async def publish_events(request: Request):
    result: PipelineResult = request.state.eventgrid
    delivery: DeliveryService = request.app.state.delivery
    await delivery.deliver(request.state.topic.name, result.events)
    return Response(status_code=200)


@router.get(
    "/validate",
    response_model=SubscriptionValidationResponse,
    response_model_by_alias=True,
)
async def validate_subscription(request: Request):
    result: PipelineResult = request.state.eventgrid
    return SubscriptionValidationResponse(validation_response=result.validation_id)
