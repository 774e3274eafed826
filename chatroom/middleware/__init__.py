from .tracing import TracingMiddleware, TRACE_HEADER

__all__ = ["TracingMiddleware", "TRACE_HEADER"]
