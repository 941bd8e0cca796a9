"""Resource services exposed by the atoship client."""

from .addresses import AddressesService
from .admin import AdminService
from .base import BaseService
from .carriers import CarriersService
from .orders import OrdersService
from .shipping import ShippingService
from .tracking import TrackingService
from .users import UsersService
from .webhooks import WebhooksService, compute_signature, verify_signature

__all__ = [
    "AddressesService",
    "AdminService",
    "BaseService",
    "CarriersService",
    "OrdersService",
    "ShippingService",
    "TrackingService",
    "UsersService",
    "WebhooksService",
    "compute_signature",
    "verify_signature",
]
