"""
Base service class for Admin Service processes.
"""

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from typing import Dict, Optional
import time

from shared.config import AdminConfig, get_config
from shared.logging import configure_logging, get_logger, set_correlation_id, clear_context
from shared.metrics import get_metrics_collector
from shared.errors import AdminServiceException

CORRELATION_HEADER = "X-Correlation-ID"


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, config: Optional[AdminConfig] = None):
        self.config = config or get_config()
        self.service_name = self.config.service_name
        self.port = self.config.port

        # Configure logging
        configure_logging(self.service_name, self.config.log_level)
        self.logger = get_logger(f"{self.service_name}.http")
        self.metrics = get_metrics_collector(self.service_name)
        self._start_time = time.time()

        # Create FastAPI app
        self.app = self._create_app()

        # Set up middleware
        self._setup_middleware()

        # Set up routes
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title="Admin Service",
            description="Administrative gateway for user, order and payment management",
            version=self.config.api_version,
            docs_url="/docs" if self.config.env in ("local", "development") else None,
            redoc_url=None,
        )

    def _setup_middleware(self):
        """Set up middleware."""

        # Correlation and request timing middleware
        @self.app.middleware("http")
        async def add_request_context(request: Request, call_next):
            start_time = time.time()
            correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))

            try:
                response = await call_next(request)
            finally:
                duration = time.time() - start_time

            response.headers[CORRELATION_HEADER] = correlation_id

            self.metrics.record_http_request(
                method=request.method,
                endpoint=request.url.path,
                status_code=response.status_code,
                duration=duration
            )

            self.logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2)
            )

            clear_context()
            return response

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health/live")
        async def liveness():
            """Liveness probe."""
            return {
                "service": self.service_name,
                "status": "alive",
                "uptime_seconds": self._get_uptime(),
            }

        @self.app.get("/health/ready")
        async def readiness():
            """Readiness probe with dependency checks."""
            try:
                dependencies = await self._check_dependencies()
                self.metrics.record_health_check("ok")
                return {
                    "service": self.service_name,
                    "status": "healthy",
                    "uptime_seconds": self._get_uptime(),
                    "dependencies": dependencies,
                    "version": self.config.api_version,
                }
            except Exception as e:
                self.logger.error("Health check failed", error=str(e))
                self.metrics.record_health_check("error")
                return JSONResponse(
                    status_code=503,
                    content={
                        "service": self.service_name,
                        "status": "unhealthy",
                        "error": str(e)
                    }
                )

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(self.metrics.registry),
                media_type=CONTENT_TYPE_LATEST
            )

        # Error handlers
        @self.app.exception_handler(AdminServiceException)
        async def admin_exception_handler(request: Request, exc: AdminServiceException):
            """Handle AdminServiceException."""
            log = self.logger.warning if exc.status_code < 500 else self.logger.error
            log(
                "Request failed",
                code=exc.code,
                message=exc.message,
                details=exc.details,
                path=request.url.path,
                method=request.method,
            )
            self.metrics.record_error(exc.code)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_response().model_dump()
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "code": "INTERNAL_ERROR",
                    "error": "Internal server error",
                    "details": {}
                }
            )

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check service dependencies. Override in subclasses."""
        return {}

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Run the service."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
