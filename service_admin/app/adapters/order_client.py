"""
Order service client for the Admin Service.
"""

from typing import Any, Dict, Mapping, Optional

from shared.errors import RemoteInvocationError

from ..core.transport import ServiceName
from .base import DownstreamClient, with_query


class OrderServiceClient(DownstreamClient):
    """Admin operations on order-service."""

    service = ServiceName.ORDER

    async def fetch_all_orders(self, token: Optional[str]) -> Any:
        try:
            return await self._call("api/admin/orders", token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to fetch orders from order-service", error=e.message)
            raise

    async def fetch_orders_paged(self, token: Optional[str], query: Optional[Mapping[str, Any]] = None) -> Any:
        try:
            return await self._call(with_query("api/admin/orders/paged", query), token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to fetch paged orders from order-service", error=e.message)
            raise

    async def fetch_order_by_id(self, order_id: str, token: Optional[str]) -> Any:
        try:
            return await self._call(f"api/admin/orders/{order_id}", token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to fetch order from order-service", error=e.message, order_id=order_id)
            raise

    async def update_order_status(self, order_id: str, status_data: Dict[str, Any], token: Optional[str]) -> Any:
        try:
            return await self._call(f"api/admin/orders/{order_id}/status", "PUT", status_data, token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to update order status in order-service", error=e.message, order_id=order_id)
            raise

    async def delete_order_by_id(self, order_id: str, token: Optional[str]) -> Any:
        try:
            return await self._call(f"api/admin/orders/{order_id}", "DELETE", token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to delete order from order-service", error=e.message, order_id=order_id)
            raise

    async def fetch_order_stats(self, token: Optional[str], options: Optional[Mapping[str, Any]] = None) -> Any:
        try:
            return await self._call(with_query("api/admin/orders/stats", options), token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to fetch order stats from order-service", error=e.message)
            raise

    async def fetch_order_tracking(self, order_id: str, token: Optional[str]) -> Any:
        try:
            return await self._call(f"api/admin/orders/{order_id}/tracking", token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to fetch order tracking from order-service", error=e.message, order_id=order_id)
            raise
