from task_manager.middleware.metrics import MetricsMiddleware


__all__ = ["MetricsMiddleware"]
