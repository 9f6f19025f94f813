"""
Admin Service: administrative gateway for user, order and payment management.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, FastAPI, Request, Response

from shared.base_service import BaseService
from shared.config import AdminConfig
from shared.errors import AuthorizationError, NotFoundError, ValidationError
from shared.logging import get_correlation_id
from shared.secrets import SidecarSecretStore

from .adapters import AuthServiceClient, OrderServiceClient, PaymentServiceClient, UserServiceClient
from .core import ServiceInvoker, build_transport
from .domain.auth_middleware import AuthenticatedUser, AuthMiddleware
from .domain.validators import (
    validate_fail_payment,
    validate_object_id,
    validate_order_status_update,
    validate_password_reset,
    validate_user_update,
)
from .messaging import EventPublisher, MessagingContext

PAYMENT_PROCESSED_TOPIC = "payment.processed"
PAYMENT_FAILED_TOPIC = "payment.failed"

# Payment states an admin may not confirm / fail
UNCONFIRMABLE_PAYMENT_STATUSES = {"failed", "cancelled", "refunded"}
UNFAILABLE_PAYMENT_STATUSES = {"succeeded", "refunded"}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return None
    try:
        return await request.json()
    except ValueError:
        raise ValidationError("Malformed JSON body")


class AdminService(BaseService):
    """Admin gateway service implementation."""

    def __init__(
        self,
        config: Optional[AdminConfig] = None,
        *,
        messaging: Optional[MessagingContext] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        secret_store: Optional[SidecarSecretStore] = None,
    ):
        super().__init__(config)

        # Transport strategy is fixed for the lifetime of the process
        self.invoker = ServiceInvoker(
            build_transport(self.config),
            timeout=self.config.http_timeout_seconds,
            metrics=self.metrics,
            http_transport=http_transport,
        )
        self.user_client = UserServiceClient(self.invoker)
        self.order_client = OrderServiceClient(self.invoker)
        self.payment_client = PaymentServiceClient(self.invoker)
        self.auth_client = AuthServiceClient(self.invoker)

        self.messaging = messaging or MessagingContext(self.config)
        self.publisher = EventPublisher(self.messaging, metrics=self.metrics)

        self.auth_middleware = AuthMiddleware(self.config, secret_store=secret_store)

        # A missing JWT secret aborts startup before any traffic is served
        @self.app.on_event("startup")
        async def _startup():
            await self.auth_middleware.load_secret()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.invoker.aclose()
            await self.messaging.close_messaging_provider()

        self._setup_home_routes()
        self._setup_user_routes()
        self._setup_order_routes()
        self._setup_payment_routes()

        self.logger.info(
            "Admin service configured",
            invocation_mode=self.invoker.mode,
            messaging_provider=self.messaging.kind.value,
        )

        # Expose service instance via app state for introspection/testing
        self.app.state.admin_service = self

    async def _check_dependencies(self) -> Dict[str, str]:
        return {
            "invocation": self.invoker.mode,
            "messaging": self.messaging.kind.value,
        }

    def _setup_home_routes(self):
        @self.app.get("/")
        async def info():
            return {
                "message": "Welcome to the Admin Service",
                "service": self.service_name,
                "description": "Administrative management service for xShop.ai platform",
                "environment": self.config.env,
            }

        @self.app.get("/version")
        async def version():
            return {"version": self.config.api_version}

    def _setup_user_routes(self):
        router = APIRouter(prefix="/api/admin/users", tags=["users"])
        require_admin = self.auth_middleware.require_roles("admin")

        @router.get("")
        async def get_all_users(user: AuthenticatedUser = Depends(require_admin)):
            self.logger.info("Admin requested all users")
            return await self.user_client.fetch_all_users(user.token)

        @router.get("/{user_id}")
        async def get_user_by_id(user_id: str, user: AuthenticatedUser = Depends(require_admin)):
            validate_object_id(user_id)
            self.logger.info("Admin requested user by id", target_id=user_id)
            return await self.user_client.fetch_user_by_id(user_id, user.token)

        @router.patch("/{user_id}")
        async def update_user(user_id: str, request: Request, user: AuthenticatedUser = Depends(require_admin)):
            validate_object_id(user_id)
            update = validate_user_update(await _read_json(request))
            self.logger.info("Admin updating user", target_id=user_id, fields=sorted(update.changes()))
            return await self.user_client.update_user_by_id(user_id, update.changes(), user.token)

        @router.delete("/{user_id}", status_code=204)
        async def delete_user(user_id: str, user: AuthenticatedUser = Depends(require_admin)):
            validate_object_id(user_id)
            if user.id and user.id == user_id:
                self.logger.warning("Admin attempted to delete own account")
                raise AuthorizationError("Admins cannot delete their own account.")
            self.logger.info("Admin deleting user", target_id=user_id)
            await self.user_client.remove_user_by_id(user_id, user.token)
            return Response(status_code=204)

        @router.post("/{user_id}/reset-password")
        async def reset_user_password(user_id: str, request: Request,
                                      user: AuthenticatedUser = Depends(require_admin)):
            validate_object_id(user_id)
            reset = validate_password_reset(await _read_json(request))
            self.logger.info("Admin triggering password reset", target_id=user_id)
            return await self.auth_client.trigger_password_reset(reset.email, user.token)

        self.app.include_router(router)

    def _setup_order_routes(self):
        router = APIRouter(prefix="/api/admin/orders", tags=["orders"])
        require_admin = self.auth_middleware.require_roles("admin")

        # Static paths must be registered before /{order_id}
        @router.get("/stats")
        async def get_order_stats(request: Request, user: AuthenticatedUser = Depends(require_admin)):
            include_recent = request.query_params.get("includeRecent") == "true"
            try:
                recent_limit = int(request.query_params.get("recentLimit", 10)) or 10
            except ValueError:
                recent_limit = 10
            self.logger.info("Admin requested order stats", include_recent=include_recent, recent_limit=recent_limit)
            return await self.order_client.fetch_order_stats(
                user.token, {"includeRecent": include_recent, "recentLimit": recent_limit}
            )

        @router.get("/paged")
        async def get_orders_paged(request: Request, user: AuthenticatedUser = Depends(require_admin)):
            query = dict(request.query_params)
            self.logger.info("Admin requested paged orders", query=query)
            return await self.order_client.fetch_orders_paged(user.token, query)

        @router.get("")
        async def get_all_orders(user: AuthenticatedUser = Depends(require_admin)):
            self.logger.info("Admin requested all orders")
            return await self.order_client.fetch_all_orders(user.token)

        @router.get("/{order_id}")
        async def get_order_by_id(order_id: str, user: AuthenticatedUser = Depends(require_admin)):
            self.logger.info("Admin requested order by id", order_id=order_id)
            return await self.order_client.fetch_order_by_id(order_id, user.token)

        @router.get("/{order_id}/tracking")
        async def get_order_tracking(order_id: str, user: AuthenticatedUser = Depends(require_admin)):
            self.logger.info("Admin requested order tracking", order_id=order_id)
            return await self.order_client.fetch_order_tracking(order_id, user.token)

        @router.put("/{order_id}/status")
        async def update_order_status(order_id: str, request: Request,
                                      user: AuthenticatedUser = Depends(require_admin)):
            update = validate_order_status_update(await _read_json(request))
            self.logger.info("Admin updating order status", order_id=order_id, status=update.status)
            return await self.order_client.update_order_status(
                order_id, update.model_dump(exclude_none=True), user.token
            )

        @router.delete("/{order_id}", status_code=204)
        async def delete_order(order_id: str, user: AuthenticatedUser = Depends(require_admin)):
            self.logger.info("Admin deleting order", order_id=order_id)
            await self.order_client.delete_order_by_id(order_id, user.token)
            return Response(status_code=204)

        self.app.include_router(router)

    def _setup_payment_routes(self):
        router = APIRouter(prefix="/api/admin/orders", tags=["payments"])
        require_admin = self.auth_middleware.require_roles("admin")

        @router.get("/{order_id}/payment")
        async def get_order_payment(order_id: str, user: AuthenticatedUser = Depends(require_admin)):
            payment = await self.payment_client.fetch_payment_by_order_id(order_id, user.token)
            if not payment:
                raise NotFoundError("No payment found for this order", details={"orderId": order_id})
            return {"success": True, "data": payment}

        @router.post("/{order_id}/confirm-payment")
        async def confirm_order_payment(order_id: str, user: AuthenticatedUser = Depends(require_admin)):
            payment = await self.payment_client.fetch_payment_by_order_id(order_id, user.token)
            if not payment:
                raise NotFoundError("No payment found for this order", details={"orderId": order_id})

            status = str(payment.get("status", "")).lower()
            if status in UNCONFIRMABLE_PAYMENT_STATUSES:
                raise ValidationError(
                    f"Cannot confirm a payment with status '{status}'",
                    details={"orderId": order_id, "status": status},
                )

            payment_id = payment.get("id") or payment.get("paymentId")
            envelope = await self.publisher.publish(
                PAYMENT_PROCESSED_TOPIC,
                {
                    "orderId": order_id,
                    "paymentId": payment_id,
                    "amount": payment.get("amount"),
                    "currency": payment.get("currency"),
                    "paymentMethod": payment.get("paymentMethod"),
                    "processedAt": _utc_now(),
                    "confirmedBy": user.id,
                },
                correlation_id=get_correlation_id(),
            )

            self.logger.info("Admin confirmed payment", order_id=order_id, event_id=envelope.event_id)
            return {
                "success": True,
                "message": "Payment confirmed",
                "data": {
                    "orderId": order_id,
                    "paymentId": payment_id,
                    "status": "confirmed",
                    "eventId": envelope.event_id,
                },
            }

        @router.post("/{order_id}/fail-payment")
        async def fail_order_payment(order_id: str, request: Request,
                                     user: AuthenticatedUser = Depends(require_admin)):
            failure = validate_fail_payment(await _read_json(request))
            payment = await self.payment_client.fetch_payment_by_order_id(order_id, user.token)

            status = str(payment.get("status", "")).lower() if payment else None
            if status in UNFAILABLE_PAYMENT_STATUSES:
                raise ValidationError(
                    f"Cannot fail a payment with status '{status}'",
                    details={"orderId": order_id, "status": status},
                )

            payment_id = (payment.get("id") or payment.get("paymentId")) if payment else None
            reason = failure.reason or "Payment marked as failed by admin"
            envelope = await self.publisher.publish(
                PAYMENT_FAILED_TOPIC,
                {
                    "orderId": order_id,
                    "paymentId": payment_id,
                    "reason": reason,
                    "failedAt": _utc_now(),
                    "failedBy": user.id,
                },
                correlation_id=get_correlation_id(),
            )

            self.logger.info("Admin failed payment", order_id=order_id, event_id=envelope.event_id)
            return {
                "success": True,
                "message": "Payment marked as failed",
                "data": {
                    "orderId": order_id,
                    "paymentId": payment_id,
                    "status": "failed",
                    "reason": reason,
                    "eventId": envelope.event_id,
                },
            }

        self.app.include_router(router)


def create_app(config: Optional[AdminConfig] = None) -> FastAPI:
    """Application factory (``uvicorn --factory service_admin.app.main:create_app``)."""
    return AdminService(config).app


def main():
    service = AdminService()
    service.run()


if __name__ == "__main__":
    main()
