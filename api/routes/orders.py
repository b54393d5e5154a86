"""
api/routes/orders.py -- Order management routes.

Routes:
  GET /orders                      -- list all orders
  POST /orders                     -- create order (id assigned by the store)
  GET /orders/{order_id}           -- order detail
  PUT /orders/{order_id}/status    -- set status, then notify downstream

Status changes:
  Any status may follow any other; there is no workflow check. After a
  successful change the (order id, new status) pair is handed to the
  configured ChangeNotifier as a background task. Delivery failures are
  logged by catalog.notifier and never affect the response.

Line items reference products by id only; the reference is not checked.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from api.limiter import READ_LIMIT, WRITE_LIMIT, limiter
from api.models import ErrorDetail, OrderIn, OrderResponse, OrderStatusUpdate
from auth.dependencies import get_current_admin
from catalog.notifier import dispatch_status_change
from catalog.store import NotFound, OrderStore

logger = logging.getLogger("lampshop.api.orders")

# All order routes require a valid bearer token.
router = APIRouter(dependencies=[Depends(get_current_admin)])


def _order_not_found(order_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(
            code="order_not_found",
            message=f"Order {order_id} not found.",
        ).model_dump(),
    )


@limiter.limit(READ_LIMIT)
@router.get("/orders", response_model=list[OrderResponse])
def list_orders(request: Request) -> list[OrderResponse]:
    orders: OrderStore = request.app.state.orders
    return [OrderResponse.from_domain(o) for o in orders.list_all()]


@limiter.limit(WRITE_LIMIT)
@router.post("/orders", response_model=OrderResponse, status_code=201)
def create_order(request: Request, body: OrderIn) -> OrderResponse:
    orders: OrderStore = request.app.state.orders
    created = orders.create(body.to_domain())
    logger.info("Order %d created by %s", created.id, request.state.admin)
    return OrderResponse.from_domain(created)


@limiter.limit(READ_LIMIT)
@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(request: Request, order_id: int) -> OrderResponse:
    orders: OrderStore = request.app.state.orders
    try:
        order = orders.get_by_id(order_id)
    except NotFound:
        raise _order_not_found(order_id) from None
    return OrderResponse.from_domain(order)


@limiter.limit(WRITE_LIMIT)
@router.put("/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    request: Request,
    order_id: int,
    body: OrderStatusUpdate,
    background_tasks: BackgroundTasks,
) -> OrderResponse:
    """Overwrite the order status and schedule the change notification.

    The notification runs after the response is sent (fire-and-forget).
    """
    orders: OrderStore = request.app.state.orders
    try:
        order = orders.patch_status(order_id, body.status)
    except NotFound:
        raise _order_not_found(order_id) from None
    logger.info("Order %d status set to %s by %s", order_id, order.status.value, request.state.admin)
    background_tasks.add_task(dispatch_status_change, request.app.state.notifier, order.id, order.status)
    return OrderResponse.from_domain(order)
