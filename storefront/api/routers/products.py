# storefront/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from storefront.api.errors import validation_details
from storefront.data.database import get_db
from storefront.domain.errors import (
    InvalidImageError,
    NotFoundError,
    UnsupportedMediaTypeError,
)
from storefront.domain.schemas import ImageUrlIn, ProductImageOut, ProductIn, ProductOut
from storefront.services.file_storage import FileStorage
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


def get_storage() -> FileStorage:
    return FileStorage()


def get_service(db: Session = Depends(get_db), storage: FileStorage = Depends(get_storage)):
    return ProductService(db=db, storage=storage)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, svc: ProductService = Depends(get_service)):
    try:
        return svc.create_product(payload.name, payload.description, payload.price, payload.sku)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=List[ProductOut])
def list_products(svc: ProductService = Depends(get_service)):
    return svc.list_products()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, svc: ProductService = Depends(get_service)):
    try:
        return svc.get_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: str, payload: ProductIn, svc: ProductService = Depends(get_service)):
    try:
        return svc.update_product(
            product_id,
            name=payload.name,
            description=payload.description,
            price=payload.price,
            sku=payload.sku,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: str, svc: ProductService = Depends(get_service)):
    try:
        svc.delete_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


@router.get("/{product_id}/images", response_model=List[ProductImageOut])
def list_images(product_id: str, svc: ProductService = Depends(get_service)):
    try:
        return svc.list_images(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{product_id}/images", status_code=201)
async def add_images(product_id: str, request: Request, svc: ProductService = Depends(get_service)):
    """
    Add images to a product.

    application/json body {url, position?} creates a single image.
    multipart/form-data with one or more files under "images" creates one
    image per file.
    """
    try:
        svc.ensure_product(product_id)
        content_type = request.headers.get("content-type", "")

        if "application/json" in content_type:
            payload = await _parse_image_url(request)
            image = svc.add_image_url(product_id, str(payload.url), payload.position)
            return ProductImageOut.model_validate(image).model_dump(mode="json", by_alias=True)

        if "multipart/form-data" in content_type:
            form = await request.form()
            files = []
            for entry in form.getlist("images"):
                if not isinstance(entry, UploadFile):
                    continue
                files.append((entry.filename, await entry.read()))

            images = svc.add_image_files(product_id, files)
            return [ProductImageOut.model_validate(i).model_dump(mode="json", by_alias=True) for i in images]

        raise UnsupportedMediaTypeError(content_type)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UnsupportedMediaTypeError as e:
        raise HTTPException(status_code=415, detail=str(e))
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail={"error": str(e), "details": e.details})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{product_id}/images/{image_id}", status_code=204)
def delete_image(product_id: str, image_id: str, svc: ProductService = Depends(get_service)):
    try:
        svc.delete_image(product_id, image_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


async def _parse_image_url(request: Request) -> ImageUrlIn:
    try:
        body = await request.json()
    except ValueError:
        raise InvalidImageError([{"field": "body", "message": "Invalid JSON body"}])
    try:
        return ImageUrlIn.model_validate(body)
    except ValidationError as e:
        raise InvalidImageError(validation_details(e.errors()))
