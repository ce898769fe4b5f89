from urllib.parse import quote
from sqlalchemy import select
from sqlalchemy.orm import Session
from typing import Iterable, Optional
from storefront.domain.models import Article, OrderItem
from storefront.core.logging_config import get_logger
from .schemas import ArticleCreate, ArticleUpdate, ArticleRead

logger = get_logger(__name__)

# Same reserved set as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"

class ArticleInUse(Exception):
    pass

class ArticleLinks:
    """Turns stored file references into absolute download links."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def _link(self, kind: str, reference: Optional[str]) -> Optional[str]:
        if not reference:
            return None
        return f"{self.base_url}/articles/{kind}/{quote(reference, safe=_URI_COMPONENT_SAFE)}"

    def image(self, reference: Optional[str]) -> Optional[str]:
        return self._link("image", reference)

    def glb(self, reference: Optional[str]) -> Optional[str]:
        return self._link("glb", reference)

    def rewrite(self, article: Article) -> ArticleRead:
        read = ArticleRead.model_validate(article)
        return read.model_copy(update={
            "image_url": self.image(article.image_url),
            "glb_url": self.glb(article.glb_url),
        })

class ArticleService:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> list[Article]:
        return list(self.db.scalars(select(Article).order_by(Article.id)))

    def get(self, article_id: int) -> Optional[Article]:
        return self.db.get(Article, article_id)

    def get_many(self, article_ids: Iterable[int]) -> dict[int, Article]:
        """Fetch a batch of articles in one query, keyed by id."""
        ids = set(article_ids)
        if not ids:
            return {}
        rows = self.db.scalars(select(Article).where(Article.id.in_(ids)))
        return {article.id: article for article in rows}

    def missing_ids(self, article_ids: Iterable[int]) -> list[int]:
        ids = set(article_ids)
        return sorted(ids - set(self.get_many(ids)))

    def create(self, data: ArticleCreate) -> Article:
        obj = Article(
            title=data.title,
            description=data.description,
            price=data.price,
            image_url=data.image_url,
        )
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        logger.info(f"Created article {obj.id}")
        return obj

    def update(self, article_id: int, data: ArticleUpdate) -> Optional[Article]:
        article = self.get(article_id)
        if not article:
            return None

        # Only fields present in the request are replaced
        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "title" and value is None:
                continue
            if field == "price" and value is None:
                continue
            setattr(article, field, value)

        self.db.commit()
        self.db.refresh(article)
        return article

    def delete(self, article_id: int) -> bool:
        article = self.get(article_id)
        if not article:
            return False
        referenced = self.db.scalar(
            select(OrderItem.id).where(OrderItem.article_id == article_id).limit(1)
        )
        if referenced is not None:
            raise ArticleInUse(f"Article {article_id} is referenced by existing orders")
        self.db.delete(article)
        self.db.commit()
        logger.info(f"Deleted article {article_id}")
        return True
