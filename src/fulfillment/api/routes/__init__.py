"""API route modules."""

from fulfillment.api.routes.disposals import router as disposals_router
from fulfillment.api.routes.fabrication import router as fabrication_router
from fulfillment.api.routes.health import router as health_router
from fulfillment.api.routes.issuances import router as issuances_router
from fulfillment.api.routes.parties import router as parties_router
from fulfillment.api.routes.products import router as products_router
from fulfillment.api.routes.purchase_orders import router as purchase_orders_router
from fulfillment.api.routes.returns import router as returns_router
from fulfillment.api.routes.supplier_returns import router as supplier_returns_router

__all__ = [
    "health_router",
    "products_router",
    "parties_router",
    "issuances_router",
    "returns_router",
    "purchase_orders_router",
    "supplier_returns_router",
    "disposals_router",
    "fabrication_router",
]
