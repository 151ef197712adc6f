from src.tracker.api.routers.auth import router as auth_router
from src.tracker.api.routers.charts import router as charts_router
from src.tracker.api.routers.data_points import router as data_points_router
from src.tracker.api.routers.subscriptions import router as subscriptions_router

__all__ = ["auth_router", "charts_router", "data_points_router", "subscriptions_router"]
