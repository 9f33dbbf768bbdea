from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
from storefront.core.document_store import DocumentStore
from storefront.core.exceptions import ProductAlreadyExistsError, ProductNotFoundError
from storefront.core.redis_client import get_document_store
from storefront.schemas.product import Product, ProductCreate, ProductUpdate, SimilarProduct
from storefront.services.product_service import product_service
from storefront.services.similarity_service import product_similarity_service

router = APIRouter()


@router.get("", response_model=List[Product])
async def list_products(store: DocumentStore = Depends(get_document_store)):
    return await product_service.get_all_products(store)


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_in: ProductCreate,
    store: DocumentStore = Depends(get_document_store)
):
    try:
        product_id = await product_service.add_product(store, product_in)
    except ProductAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await product_service.get_product(store, product_id)


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: int,
    store: DocumentStore = Depends(get_document_store)
):
    try:
        return await product_service.get_product(store, product_id)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    product_id: int,
    product_in: ProductUpdate,
    store: DocumentStore = Depends(get_document_store)
):
    try:
        return await product_service.update_product(store, product_id, product_in)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    store: DocumentStore = Depends(get_document_store)
):
    try:
        await product_service.delete_product(store, product_id)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{product_id}/similar", response_model=List[SimilarProduct])
async def similar_products(
    product_id: int,
    top_n: int = Query(default=3, ge=1, le=20),
    store: DocumentStore = Depends(get_document_store)
):
    """Closest catalog products by category, price and description"""
    try:
        product = await product_service.get_product(store, product_id)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await product_similarity_service.get_top_similar_products(store, product, top_n)
