import os
from storefront.domain.models import Article
from storefront.application.article_service import ArticleService

def test_list_articles_empty(client):
    resp = client.get('/articles')
    assert resp.status_code == 200
    assert resp.json() == []

def test_list_articles_rewrites_file_references(client, make_article):
    make_article(title="Chair", image_url="red chair.png", glb_url="chair.glb")
    make_article(title="Table")

    resp = client.get('/articles')
    assert resp.status_code == 200
    chair, table = resp.json()
    assert chair["imageUrl"] == "http://testserver/articles/image/red%20chair.png"
    assert chair["glbUrl"] == "http://testserver/articles/glb/chair.glb"
    assert table["imageUrl"] is None
    assert table["glbUrl"] is None
    assert set(chair) >= {"id", "title", "description", "price", "createdAt"}

def test_get_article(client, make_article):
    article = make_article(title="Vase", price=4500, image_url="/uploads/a b.png")
    resp = client.get(f'/articles/{article.id}')
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Vase"
    assert body["price"] == 4500
    assert body["imageUrl"] == "http://testserver/articles/image/%2Fuploads%2Fa%20b.png"

def test_get_article_not_found(client):
    resp = client.get('/articles/999')
    assert resp.status_code == 404
    assert resp.json() == {"error": "Article not found"}

def test_get_article_with_non_numeric_id_is_not_found(client):
    resp = client.get('/articles/abc')
    assert resp.status_code == 404
    assert "error" in resp.json()

def test_article_id_beyond_column_range_is_not_found(client):
    huge = 99999999999999999999
    resp = client.get(f'/articles/{huge}')
    assert resp.status_code == 404
    assert resp.json() == {"error": "Article not found"}
    assert client.patch(f'/articles/{huge}', json={"title": "x"}).status_code == 404
    assert client.delete(f'/articles/{huge}').status_code == 404
    assert client.get('/articles/0').status_code == 404

def test_update_article_with_non_numeric_id(client):
    resp = client.patch('/articles/abc', json={"title": "x"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid article id"}

def test_service_lists_articles_and_reports_missing_ids(db, make_article):
    lamp = make_article(title="Lamp")
    chair = make_article(title="Chair")
    service = ArticleService(db)
    assert [a.title for a in service.list_all()] == ["Lamp", "Chair"]
    assert service.missing_ids([chair.id, lamp.id, 4040]) == [4040]

def test_create_article_rounds_price(client, db):
    resp = client.post('/articles', data={"title": "Rug", "description": "Wool", "price": "12.5"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["price"] == 13
    assert body["title"] == "Rug"
    assert db.get(Article, body["id"]).price == 13

def test_create_article_with_image_url(client):
    resp = client.post('/articles', data={"title": "Rug", "price": "10", "imageUrl": "rug.png"})
    assert resp.status_code == 201
    assert resp.json()["imageUrl"] == "rug.png"

def test_create_article_upload_takes_precedence(client, settings):
    resp = client.post(
        '/articles',
        data={"title": "Poster", "price": "5", "imageUrl": "ignored.png"},
        files={"image": ("poster.PNG", b"\x89PNG fake", "image/png")},
    )
    assert resp.status_code == 201
    image_url = resp.json()["imageUrl"]
    assert image_url.startswith("/uploads/")
    assert image_url.endswith(".png")
    stored = os.path.join(settings.UPLOADS_DIR, image_url.rsplit("/", 1)[1])
    with open(stored, "rb") as fh:
        assert fh.read() == b"\x89PNG fake"

def test_uploaded_file_is_served_statically(client):
    resp = client.post(
        '/articles',
        data={"title": "Poster", "price": "5"},
        files={"image": ("poster.txt", b"hello", "text/plain")},
    )
    resp = client.get(resp.json()["imageUrl"])
    assert resp.status_code == 200
    assert resp.content == b"hello"

def test_create_article_upload_too_large(client, settings, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 4)
    resp = client.post(
        '/articles',
        data={"title": "Poster", "price": "5"},
        files={"image": ("poster.png", b"too many bytes", "image/png")},
    )
    assert resp.status_code == 400

def test_create_article_missing_fields(client, db):
    resp = client.post('/articles', data={"description": "no title"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}
    resp = client.post('/articles', data={"title": "No price"})
    assert resp.status_code == 400
    assert db.query(Article).count() == 0

def test_create_article_rejects_invalid_price(client):
    resp = client.post('/articles', data={"title": "Rug", "price": "cheap"})
    assert resp.status_code == 400
    resp = client.post('/articles', data={"title": "Rug", "price": "-3"})
    assert resp.status_code == 400

def test_update_article_partial(client, make_article):
    article = make_article(title="Old", price=100, description="keep me")
    resp = client.patch(f'/articles/{article.id}', json={"title": "New", "price": 2.4})
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "New"
    assert body["price"] == 2
    assert body["description"] == "keep me"

def test_update_article_not_found(client):
    resp = client.patch('/articles/42', json={"title": "x"})
    assert resp.status_code == 404

def test_update_article_invalid_body(client, make_article):
    article = make_article()
    resp = client.patch(f'/articles/{article.id}', json={"price": "free"})
    assert resp.status_code == 400
    assert "price" in resp.json()["error"]

def test_delete_article(client, make_article, db):
    article_id = make_article().id
    resp = client.delete(f'/articles/{article_id}')
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    db.expire_all()
    assert db.query(Article).filter(Article.id == article_id).first() is None
    assert client.delete(f'/articles/{article_id}').status_code == 404

def test_delete_article_referenced_by_order(client, make_article, make_order, user):
    article = make_article()
    make_order(user.id, [(article.id, 1)])
    resp = client.delete(f'/articles/{article.id}')
    assert resp.status_code == 400

def test_serve_image_and_glb(client, settings):
    with open(os.path.join(settings.ASSETS_DIR, "lamp.png"), "wb") as fh:
        fh.write(b"image-bytes")
    with open(os.path.join(settings.ASSETS_DIR, "lamp.glb"), "wb") as fh:
        fh.write(b"glb-bytes")

    resp = client.get('/articles/image/lamp.png')
    assert resp.status_code == 200
    assert resp.content == b"image-bytes"
    resp = client.get('/articles/glb/lamp.glb')
    assert resp.status_code == 200
    assert resp.content == b"glb-bytes"

def test_serve_file_uses_base_name_only(client, settings):
    with open(os.path.join(settings.ASSETS_DIR, "shelf.png"), "wb") as fh:
        fh.write(b"shelf")
    resp = client.get('/articles/image/%2Fuploads%2Fshelf.png')
    assert resp.status_code == 200
    assert resp.content == b"shelf"

def test_serve_missing_file(client):
    resp = client.get('/articles/image/nope.png')
    assert resp.status_code == 404
    assert resp.json() == {"error": "Image file not found"}
    resp = client.get('/articles/glb/nope.glb')
    assert resp.status_code == 404
    assert resp.json() == {"error": "GLB file not found"}
