from pydantic import BaseModel, Field

from menucart.application.use_cases.catalog_view import format_price
from menucart.domain.entities.catalog_item import CatalogItem
from menucart.domain.entities.catalog_view import CatalogViewResult


class MenuItemSchema(BaseModel):
    id: int
    name: str
    category: str
    price: int
    price_display: str
    image_url: str | None = None
    description: str | None = None
    is_available: bool = True
    in_cart: int = 0

    @classmethod
    def from_entity(cls, item: CatalogItem, in_cart: int = 0) -> "MenuItemSchema":
        return cls(
            id=item.id,
            name=item.name,
            category=item.category,
            price=item.price,
            price_display=format_price(item.price),
            image_url=item.image_url,
            description=item.description,
            is_available=item.is_available,
            in_cart=in_cart,
        )


class ActiveFilterSchema(BaseModel):
    kind: str
    value: str


class MenuResponseSchema(BaseModel):
    items: list[MenuItemSchema]
    result_count: int
    category: str
    search_text: str
    is_searching: bool
    show_category_filter: bool
    categories: list[str]
    active_filters: list[ActiveFilterSchema] = Field(default_factory=list)
    empty_message: str | None = None
    suggestions: list[str] = Field(default_factory=list)
    cart_count: int = 0
    is_loading: bool = False
    stale: bool = False

    @classmethod
    def from_view(
        cls,
        view: CatalogViewResult,
        cart: dict[int, int],
        categories: list[str],
        is_loading: bool = False,
        stale: bool = False,
    ) -> "MenuResponseSchema":
        return cls(
            items=[MenuItemSchema.from_entity(i, cart.get(i.id, 0)) for i in view.items],
            result_count=view.result_count,
            category=view.category,
            search_text=view.search_text,
            is_searching=view.is_searching,
            show_category_filter=view.show_category_filter,
            categories=categories,
            active_filters=[ActiveFilterSchema(kind=k, value=v) for k, v in view.active_filters],
            empty_message=view.empty_message,
            suggestions=list(view.suggestions),
            cart_count=sum(cart.values()),
            is_loading=is_loading,
            stale=stale,
        )


class CartResponseSchema(BaseModel):
    items: dict[int, int]
    total_count: int


class CartMutationResponseSchema(BaseModel):
    item_id: int
    quantity: int
    total_count: int


class RefreshResponseSchema(BaseModel):
    item_count: int
