from storefront.platform.client import StorefrontClient, StorefrontError, StorefrontUserError

__all__ = ["StorefrontClient", "StorefrontError", "StorefrontUserError"]
