from enum import Enum


class UserRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INVITED = "invited"
    DISABLED = "disabled"


class SubscriptionStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class LimitType(str, Enum):
    TEAM_MEMBERS = "team_members"
    PRODUCTS = "products"
    LOCATIONS = "locations"


class ChangeType(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    SET = "set"


class AlertType(str, Enum):
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class PurchaseOrderStatus(str, Enum):
    PENDING = "pending"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class StockTransferStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    REFUNDED = "refunded"
    PARTIAL = "partial"


class AuditResourceType(str, Enum):
    USER = "user"
    ORGANIZATION = "organization"
    PRODUCT = "product"
    LOCATION = "location"
    SUPPLIER = "supplier"
    CUSTOMER = "customer"
    SALE = "sale"
    PURCHASE_ORDER = "purchase_order"
    STOCK_TRANSFER = "stock_transfer"


class AuditAction(str, Enum):
    USER_LOGIN = "user.login"
    USER_LOGOUT = "user.logout"
    USER_INVITED = "user.invited"
    USER_ROLE_CHANGED = "user.role_changed"
    USER_REMOVED = "user.removed"

    ORGANIZATION_CREATED = "organization.created"

    PRODUCT_CREATED = "product.created"
    PRODUCT_UPDATED = "product.updated"
    PRODUCT_DELETED = "product.deleted"
    PRODUCT_STOCK_UPDATED = "product.stock_updated"

    LOCATION_CREATED = "location.created"
    LOCATION_UPDATED = "location.updated"
    LOCATION_DELETED = "location.deleted"

    SUPPLIER_CREATED = "supplier.created"
    SUPPLIER_UPDATED = "supplier.updated"
    SUPPLIER_DELETED = "supplier.deleted"

    CUSTOMER_CREATED = "customer.created"
    CUSTOMER_DELETED = "customer.deleted"

    SALE_CREATED = "sale.created"

    PURCHASE_ORDER_CREATED = "purchase_order.created"
    PURCHASE_ORDER_UPDATED = "purchase_order.updated"
    PURCHASE_ORDER_RECEIVED = "purchase_order.received"
    PURCHASE_ORDER_DELETED = "purchase_order.deleted"

    TRANSFER_COMPLETED = "transfer.completed"
