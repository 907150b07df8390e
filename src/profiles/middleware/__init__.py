from src.profiles.middleware.security import SecurityHeadersMiddleware

__all__ = ["SecurityHeadersMiddleware"]
