import json

import pytest

from storefront.domain.models import Article
from storefront.seed import load_items, import_articles

def test_import_articles_rounds_prices(tmp_path, db):
    path = tmp_path / "dummy_items.json"
    path.write_text(json.dumps([
        {"title": "Lamp", "description": "Brass", "price": 19.5, "image": "lamp.png", "glb": "lamp.glb"},
        {"title": "Rug", "price": 40.2, "image": ""},
    ]))

    assert import_articles(db, load_items(path)) == 2

    lamp, rug = db.query(Article).order_by(Article.id).all()
    assert (lamp.price, lamp.image_url, lamp.glb_url) == (20, "lamp.png", "lamp.glb")
    assert (rug.price, rug.image_url, rug.glb_url, rug.description) == (40, None, None, None)

def test_load_items_requires_array(tmp_path):
    path = tmp_path / "items.json"
    path.write_text(json.dumps({"title": "Lamp"}))
    with pytest.raises(ValueError):
        load_items(path)
