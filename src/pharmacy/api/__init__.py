from pharmacy.api.errors import register_pharmacy_exception_handlers
from pharmacy.api.routes import catalog_router, order_router, product_router

__all__ = ["catalog_router", "order_router", "product_router", "register_pharmacy_exception_handlers"]
