from fastapi import APIRouter, Depends, HTTPException, Form, File, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from typing import Optional
from storefront.core_settings import Settings, get_settings
from storefront.infrastructure.db import get_db
from storefront.infrastructure.storage import save_upload, resolve_asset, UploadTooLarge
from storefront.application.article_service import ArticleService, ArticleLinks, ArticleInUse
from storefront.application.schemas import ArticleCreate, ArticleUpdate, ArticleRead, DeleteResult, parse_price
from .deps import get_links, parse_id

router = APIRouter(prefix="/articles", tags=["articles"])

@router.get("", response_model=list[ArticleRead])
def list_articles(db: Session = Depends(get_db), links: ArticleLinks = Depends(get_links)):
    return [links.rewrite(article) for article in ArticleService(db).list_all()]

@router.post("", response_model=ArticleRead, status_code=201)
def create_article(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Create an article from a multipart form; an uploaded image wins over imageUrl."""
    if not title or not price:
        raise HTTPException(status_code=400, detail="Missing required fields")
    try:
        rounded_price = parse_price(price)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid price: {e}")

    if image is not None and image.filename:
        try:
            stored = save_upload(image.file, image.filename, settings.UPLOADS_DIR, settings.MAX_UPLOAD_BYTES)
        except UploadTooLarge as e:
            raise HTTPException(status_code=400, detail=str(e))
        image_url = f"/uploads/{stored}"

    data = ArticleCreate(title=title, description=description, price=rounded_price, image_url=image_url)
    return ArticleService(db).create(data)

@router.get("/image/{filename:path}")
def get_article_image(filename: str, settings: Settings = Depends(get_settings)):
    path = resolve_asset(settings.ASSETS_DIR, filename)
    if path is None:
        raise HTTPException(status_code=404, detail="Image file not found")
    return FileResponse(path)

@router.get("/glb/{filename:path}")
def get_article_glb(filename: str, settings: Settings = Depends(get_settings)):
    path = resolve_asset(settings.ASSETS_DIR, filename)
    if path is None:
        raise HTTPException(status_code=404, detail="GLB file not found")
    return FileResponse(path, media_type="model/gltf-binary")

@router.get("/{article_id}", response_model=ArticleRead)
def get_article(article_id: str, db: Session = Depends(get_db), links: ArticleLinks = Depends(get_links)):
    article = ArticleService(db).get(parse_id(article_id, "Article not found", "Article not found", invalid_status=404))
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return links.rewrite(article)

@router.patch("/{article_id}", response_model=ArticleRead)
def update_article(article_id: str, payload: ArticleUpdate, db: Session = Depends(get_db)):
    article = ArticleService(db).update(parse_id(article_id, "Invalid article id", "Article not found"), payload)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article

@router.delete("/{article_id}", response_model=DeleteResult)
def delete_article(article_id: str, db: Session = Depends(get_db)):
    try:
        deleted = ArticleService(db).delete(parse_id(article_id, "Invalid article id", "Article not found"))
    except ArticleInUse as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Article not found")
    return DeleteResult(success=True)
