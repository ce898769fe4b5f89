"""Load the product catalog from a JSON file of dummy items.

Each entry looks like {"title", "description", "price", "image", "glb"};
image and glb are bare filenames inside the assets directory.
"""

import json
import sys
from pathlib import Path
from sqlalchemy.orm import Session
from storefront.core import setup_logging, get_logger
from storefront.core_settings import get_settings
from storefront.domain.models import Article
from storefront.application.schemas import parse_price

logger = get_logger(__name__)

def load_items(path: Path) -> list[dict]:
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array")
    return data

def import_articles(db: Session, items: list[dict]) -> int:
    count = 0
    for item in items:
        db.add(Article(
            title=item["title"],
            description=item.get("description"),
            price=parse_price(item["price"]),
            image_url=item.get("image") or None,
            glb_url=item.get("glb") or None,
        ))
        count += 1
    db.commit()
    return count

def main(argv=None) -> int:
    settings = get_settings()
    setup_logging(service_name="storefront-seed", level=settings.LOG_LEVEL)
    argv = sys.argv[1:] if argv is None else argv
    path = Path(argv[0] if argv else settings.SEED_FILE)

    from storefront.infrastructure.db import SessionLocal, init_models
    init_models()
    items = load_items(path)
    with SessionLocal() as db:
        count = import_articles(db, items)
    logger.info(f"Imported {count} article(s) from {path}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
