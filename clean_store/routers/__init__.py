from . import auth, products, system, users

__all__ = ["auth", "products", "system", "users"]
