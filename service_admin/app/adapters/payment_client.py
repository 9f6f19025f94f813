"""
Payment service client for the Admin Service.
"""

from typing import Any, Dict, Mapping, Optional

from shared.errors import RemoteInvocationError

from ..core.transport import ServiceName
from .base import DownstreamClient, with_query


class PaymentServiceClient(DownstreamClient):
    """Read access to payment-service."""

    service = ServiceName.PAYMENT

    async def fetch_payment_by_order_id(self, order_id: str, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Payment for ``order_id``, or ``None`` when there is none.

        A 401 from payment-service is reported as "no payment" as well, so
        callers see the same absent result for both cases.
        """
        self.logger.debug("Fetching payment from payment-service", order_id=order_id, has_token=bool(token))
        path = f"api/payments/order/{order_id}"
        try:
            payment = await self._call(path, token=token)
        except RemoteInvocationError as e:
            if e.upstream_status == 404:
                self.logger.debug("No payment found for order", order_id=order_id)
                return None
            if e.upstream_status == 401:
                self.logger.warning(
                    "Unauthorized access to payment-service - JWT may be invalid or expired",
                    order_id=order_id,
                )
                return None
            self.logger.error("Failed to fetch payment from payment-service", error=e.message, order_id=order_id)
            raise

        if payment is not None and not isinstance(payment, dict):
            self.logger.error("Unexpected payment payload from payment-service", order_id=order_id,
                              payload_type=type(payment).__name__)
            raise RemoteInvocationError(
                self.service.value, path, "GET", status_code=502,
                error_text="Unexpected payment payload from payment-service",
            )
        return payment

    async def fetch_payment_by_id(self, payment_id: str, token: Optional[str]) -> Any:
        try:
            return await self._call(f"api/payments/{payment_id}", token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to fetch payment from payment-service", error=e.message, payment_id=payment_id)
            raise

    async def fetch_payments(self, token: Optional[str], query: Optional[Mapping[str, Any]] = None) -> Any:
        try:
            return await self._call(with_query("api/payments", query), token=token)
        except RemoteInvocationError as e:
            self.logger.error("Failed to fetch payments from payment-service", error=e.message)
            raise
