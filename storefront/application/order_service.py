from collections import defaultdict
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional, Sequence
from storefront.domain.models import Order, OrderItem
from storefront.core.logging_config import get_logger
from .article_service import ArticleService, ArticleLinks
from .schemas import OrderItemIn, OrderPatch, OrderBase, OrderItemRead

logger = get_logger(__name__)

class UnknownArticles(Exception):
    def __init__(self, article_ids: list[int]):
        super().__init__(f"Unknown article id(s): {', '.join(str(i) for i in article_ids)}")
        self.article_ids = article_ids

class OrderService:
    def __init__(self, db: Session):
        self.db = db
        self.articles = ArticleService(db)

    def get(self, order_id: int) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def _items_for(self, order_ids: Sequence[int]) -> list[OrderItem]:
        if not order_ids:
            return []
        return list(self.db.scalars(
            select(OrderItem).where(OrderItem.order_id.in_(order_ids)).order_by(OrderItem.id)
        ))

    def _assemble(self, orders: Sequence[Order], links: Optional[ArticleLinks] = None) -> list[dict]:
        """Nest items under their orders.

        With links, every item also carries its article with download URLs.
        Items, then articles, are each fetched in a single query.
        """
        items = self._items_for([o.id for o in orders])
        articles = self.articles.get_many(i.article_id for i in items) if links is not None else {}

        grouped: dict[int, list[dict]] = defaultdict(list)
        for item in items:
            item_dict = OrderItemRead.model_validate(item).model_dump()
            if links is not None:
                article = articles.get(item.article_id)
                item_dict["article"] = links.rewrite(article) if article else None
            grouped[item.order_id].append(item_dict)

        return [
            {**OrderBase.model_validate(order).model_dump(), "items": grouped[order.id]}
            for order in orders
        ]

    def list_for_user(self, user_id: int, links: ArticleLinks) -> list[dict]:
        orders = list(self.db.scalars(
            select(Order).where(Order.user_id == user_id).order_by(Order.id)
        ))
        return self._assemble(orders, links)

    def list_all(self) -> list[dict]:
        orders = list(self.db.scalars(select(Order).order_by(Order.id)))
        return self._assemble(orders)

    def get_detail(self, order_id: int, links: ArticleLinks) -> Optional[dict]:
        order = self.get(order_id)
        if not order:
            return None
        return self._assemble([order], links)[0]

    def _check_articles(self, items: Sequence[OrderItemIn]) -> None:
        missing = self.articles.missing_ids(i.article_id for i in items)
        if missing:
            raise UnknownArticles(missing)

    def create(self, user_id: int, items: Sequence[OrderItemIn]) -> dict:
        """Insert an order and its items in one transaction."""
        self._check_articles(items)
        try:
            order = Order(user_id=user_id)
            self.db.add(order)
            self.db.flush()  # assign id
            submitted = [
                {"order_id": order.id, "article_id": item.article_id, "quantity": item.quantity}
                for item in items
            ]
            self.db.add_all(OrderItem(**values) for values in submitted)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to create order for user {user_id}")
            raise

        self.db.refresh(order)
        logger.info(f"Created order {order.id} with {len(submitted)} item(s)")
        return {**OrderBase.model_validate(order).model_dump(), "items": submitted}

    def patch(self, order_id: int, data: OrderPatch) -> Optional[dict]:
        """Replace the item set and/or status of an order in one transaction."""
        order = self.db.scalar(select(Order).where(Order.id == order_id).with_for_update())
        if not order:
            self.db.rollback()
            return None

        try:
            if data.items is not None:
                self._check_articles(data.items)
                self.db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
                self.db.add_all(
                    OrderItem(order_id=order_id, article_id=item.article_id, quantity=item.quantity)
                    for item in data.items
                )
            if data.status is not None:
                order.status = data.status
            self.db.commit()
        except UnknownArticles:
            self.db.rollback()
            raise
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to patch order {order_id}")
            raise

        self.db.refresh(order)
        return self._assemble([order])[0]
