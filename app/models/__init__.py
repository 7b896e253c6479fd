# Import every model so Base.metadata knows all tables before create_all().
from app.models.category import Category  # noqa: F401
from app.models.product import Product  # noqa: F401
from app.models.pricing_rule import PricingRule  # noqa: F401
from app.models.lifecycle_history import LifecycleHistory  # noqa: F401
from app.models.user import User  # noqa: F401
