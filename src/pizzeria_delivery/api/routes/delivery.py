"""Checkout delivery calculation endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ...errors import InvalidInput
from ...schemas.delivery import DeliveryCalculationRequest, DeliveryCalculationResponse
from ...services.delivery.resolver import resolve_delivery

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/delivery", tags=["delivery"])


@router.post(
    "/calculate",
    response_model=DeliveryCalculationResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
)
def calculate_delivery(payload: DeliveryCalculationRequest):
    """Resolve deliverability, fee and ETA for an address or coordinate pair."""
    logger.info(
        f"Calculating delivery (address={'yes' if payload.address else 'no'}, "
        f"coordinates={'yes' if payload.latitude is not None else 'no'})"
    )
    try:
        decision = resolve_delivery(address_text=payload.address, coordinate=payload.coordinate())
    except InvalidInput as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "deliverable": False,
                "method": "error",
                "error": exc.reason,
                "message": exc.message,
            },
        )
    except Exception:
        logger.exception("Delivery calculation failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "deliverable": False,
                "method": "error",
                "error": "internal_error",
                "message": "Could not calculate delivery. Please try again.",
            },
        )
    return DeliveryCalculationResponse.from_decision(decision)
