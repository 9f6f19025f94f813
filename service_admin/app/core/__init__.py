"""
Downstream invocation core: transport strategies and the invocation facade.
"""

from .transport import (
    DirectTransport,
    ServiceName,
    SidecarTransport,
    build_transport,
    normalize_path,
)
from .invocation import InvocationRequest, ServiceInvoker

__all__ = [
    "DirectTransport",
    "SidecarTransport",
    "ServiceName",
    "build_transport",
    "normalize_path",
    "InvocationRequest",
    "ServiceInvoker",
]
