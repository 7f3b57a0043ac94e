"""
Orders API router.

Routes (mounted with the '/orders' prefix in the main app):
- POST /orders - Place an order
- GET /orders?user_id=...|status=... - List orders of a user or in a status
- GET /orders/{order_id} - Fetch one order
- PUT /orders/{order_id}/status - Move an order to a new status
- POST /orders/{order_id}/cancel - Cancel an order
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from shop.api.dependencies import get_order_service
from shop.api.requests import CreateOrderRequest, UpdateOrderStatusRequest
from shop.api.responses import OrderResponse
from shop.exceptions import InvalidArgumentError, NotFoundError
from shop.usecase import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    request: CreateOrderRequest,
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    logger.info(
        "Order creation requested",
        extra={"user_id": request.user_id, "item_count": len(request.items)},
    )
    order = await service.create_order(
        request.user_id, [item.to_domain() for item in request.items]
    )
    return OrderResponse.from_domain(order)


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    user_id: Optional[str] = None,
    status: Optional[str] = None,
    service: OrderService = Depends(get_order_service),
) -> List[OrderResponse]:
    if user_id is not None and status is not None:
        raise InvalidArgumentError("Filter by user_id or status, not both")
    if user_id is not None:
        orders = await service.get_orders_by_user(user_id)
    elif status is not None:
        orders = await service.get_orders_by_status(status)
    else:
        raise InvalidArgumentError("Either user_id or status is required")
    return [OrderResponse.from_domain(o) for o in orders]


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await service.get_order(order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    return OrderResponse.from_domain(order)


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    request: UpdateOrderStatusRequest,
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await service.update_order_status(order_id, request.status)
    return OrderResponse.from_domain(order)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await service.cancel_order(order_id)
    return OrderResponse.from_domain(order)
