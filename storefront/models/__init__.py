from storefront.models.entities import RestockNotification

__all__ = ["RestockNotification"]
