from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from meatshop.application.container import Services
from meatshop.core.config import settings
from meatshop.domain.schemas import (
    DeliveryEstimate, DeliverySettingsIn, DeliverySettingsOut, NonDeliveryDayIn,
    NonDeliveryDayOut, SuccessResponse,
)
from meatshop.interfaces.dependencies import RequestContext, get_services, require_admin

router = APIRouter(prefix="/api", tags=["delivery"])


@router.get("/delivery-settings", response_model=DeliverySettingsOut)
def get_delivery_settings(services: Services = Depends(get_services)):
    return services.delivery.current_settings()


@router.put("/delivery-settings", response_model=DeliverySettingsOut)
def update_delivery_settings(
    payload: DeliverySettingsIn,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    return services.delivery.update_settings(payload)


@router.get("/delivery-date", response_model=DeliveryEstimate)
def get_delivery_date(
    lang: str = Query(settings.DEFAULT_LANGUAGE, max_length=5),
    services: Services = Depends(get_services),
):
    return services.delivery.estimate(language=lang)


@router.get("/non-delivery-days", response_model=List[NonDeliveryDayOut])
def list_non_delivery_days(services: Services = Depends(get_services)):
    return services.delivery.list_days()


@router.post("/non-delivery-days", response_model=NonDeliveryDayOut, status_code=201)
def create_non_delivery_day(
    payload: NonDeliveryDayIn,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    return services.delivery.add_day(payload)


@router.delete("/non-delivery-days/{day_id}", response_model=SuccessResponse)
def delete_non_delivery_day(
    day_id: int,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    if not services.delivery.remove_day(day_id):
        raise HTTPException(status_code=404, detail="Day not found")
    return SuccessResponse()
