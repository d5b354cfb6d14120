# Import all models to ensure they are registered with SQLAlchemy
from shared.models.organizations import Organization
from shared.models.users import Users
from shared.models.user_login_session import UserLoginSession
from shared.models.subscriptions import Subscription, SubscriptionPlan
from shared.models.audit_logs import AuditLog
from .products import Product
from .locations import Location
from .stock_levels import StockLevel
from .stock_history import StockHistory
from .suppliers import Supplier
from .customers import Customer
from .purchase_orders import PurchaseOrder, PurchaseOrderItem
from .stock_transfers import StockTransfer
from .alerts import Alert
from .sales import Sale, SaleItem
