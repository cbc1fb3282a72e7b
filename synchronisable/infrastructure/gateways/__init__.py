"""
Gateways remotos en proceso (fetch/find).
"""
from synchronisable.infrastructure.gateways.base import GatewayBase, ListGateway

__all__ = ["GatewayBase", "ListGateway"]
