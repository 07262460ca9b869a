from .items import Item, BasketLine
from .promotions import ALL_ITEMS, Promotion, PromotionKind
from .pricing import ItemDiscount, PricingResult
from .orders import Order, OrderItem, OrderStatus, generate_order_id

__all__ = [
    # Collaborator types
    "Item",
    "BasketLine",
    # Promotions
    "ALL_ITEMS",
    "Promotion",
    "PromotionKind",
    # Pricing
    "ItemDiscount",
    "PricingResult",
    # Orders
    "Order",
    "OrderItem",
    "OrderStatus",
    "generate_order_id",
]
