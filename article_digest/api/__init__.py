from .main import create_app, error_status

__all__ = ["create_app", "error_status"]
