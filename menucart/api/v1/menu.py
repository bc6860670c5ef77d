from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from menucart.api.v1.schemas import (
    CartMutationResponseSchema,
    CartResponseSchema,
    MenuResponseSchema,
    RefreshResponseSchema,
)
from menucart.application.exceptions import CartPersistenceError, CatalogFetchError
from menucart.application.use_cases.menu_session import MenuSession
from menucart.domain.entities.catalog_view import CatalogViewResult
from menucart.wiring.dependencies import get_session

router = APIRouter()


class FilterRequestSchema(BaseModel):
    category: str | None = None
    search_text: str | None = None


def _menu_response(session: MenuSession, view: CatalogViewResult) -> MenuResponseSchema:
    return MenuResponseSchema.from_view(
        view,
        cart=session.cart.items(),
        categories=session.categories,
        is_loading=session.is_loading,
        stale=session.mirror.last_error is not None,
    )


@router.get("/menu", response_model=MenuResponseSchema)
async def get_menu(
    category: str | None = Query(None),
    q: str | None = Query(None),
    session: MenuSession = Depends(get_session),
):
    try:
        view = session.view() if category is None and q is None else session.preview(category, q)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _menu_response(session, view)


@router.put("/menu/filter", response_model=MenuResponseSchema)
async def update_filter(req: FilterRequestSchema, session: MenuSession = Depends(get_session)):
    try:
        view = session.view()
        if req.category is not None:
            view = session.set_category(req.category)
        if req.search_text is not None:
            view = session.set_search(req.search_text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _menu_response(session, view)


@router.get("/cart", response_model=CartResponseSchema)
async def get_cart(session: MenuSession = Depends(get_session)):
    return CartResponseSchema(items=session.cart.items(), total_count=session.cart_count())


@router.post("/cart/items/{item_id}/add", response_model=CartMutationResponseSchema)
async def add_item(item_id: int, session: MenuSession = Depends(get_session)):
    try:
        quantity = session.add_to_cart(item_id)
    except CartPersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return CartMutationResponseSchema(item_id=item_id, quantity=quantity, total_count=session.cart_count())


@router.post("/cart/items/{item_id}/remove", response_model=CartMutationResponseSchema)
async def remove_item(item_id: int, session: MenuSession = Depends(get_session)):
    try:
        quantity = session.remove_from_cart(item_id)
    except CartPersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return CartMutationResponseSchema(item_id=item_id, quantity=quantity, total_count=session.cart_count())


@router.post("/catalog/refresh", response_model=RefreshResponseSchema)
async def refresh_catalog(session: MenuSession = Depends(get_session)):
    try:
        snapshot = await session.refresh()
    except CatalogFetchError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return RefreshResponseSchema(item_count=len(snapshot))
