from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from storefront.core.logging_config import get_logger
from storefront.infrastructure.db import get_db
from storefront.infrastructure.payments import StripeGateway, PaymentGatewayError
from storefront.application.article_service import ArticleLinks
from storefront.application.order_service import OrderService, UnknownArticles
from storefront.application.payment_service import PaymentService
from storefront.application.schemas import (
    OrderCreate, OrderPatch, OrderRead, OrderDetail, OrderCreated,
    PaymentSheetRequest, PaymentSheetResponse,
)
from storefront.domain.models import User
from .deps import get_current_user, get_links, get_payment_gateway, parse_id

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

@router.post("/payment-sheet", response_model=PaymentSheetResponse)
def create_payment_sheet(payload: PaymentSheetRequest, gateway: StripeGateway = Depends(get_payment_gateway)):
    try:
        return PaymentService(gateway).create_payment_sheet(payload)
    except PaymentGatewayError:
        logger.exception("Payment processor request failed")
        raise HTTPException(status_code=500, detail="Failed to create payment sheet")

@router.get("", response_model=list[OrderDetail])
def list_my_orders(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    links: ArticleLinks = Depends(get_links),
):
    """Orders of the authenticated caller, each item with its article."""
    return OrderService(db).list_for_user(user.id, links)

@router.get("/all", response_model=list[OrderRead])
def list_all_orders(db: Session = Depends(get_db)):
    return OrderService(db).list_all()

@router.get("/{order_id}", response_model=OrderDetail)
def get_order(order_id: str, db: Session = Depends(get_db), links: ArticleLinks = Depends(get_links)):
    order = OrderService(db).get_detail(parse_id(order_id, "Invalid order id", "Order not found"), links)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order

@router.post("", response_model=OrderCreated, status_code=201)
def create_order(payload: OrderCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not payload.items:
        raise HTTPException(status_code=400, detail="Missing or invalid items")
    try:
        return OrderService(db).create(user.id, payload.items)
    except UnknownArticles as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Failed to create order")

@router.patch("/{order_id}", response_model=OrderRead)
def patch_order(order_id: str, payload: OrderPatch, db: Session = Depends(get_db)):
    try:
        order = OrderService(db).patch(parse_id(order_id, "Invalid order id", "Order not found"), payload)
    except UnknownArticles as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Failed to update order")
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
