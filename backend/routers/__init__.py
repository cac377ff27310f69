# Routers package
from .sessions import router as sessions_router
from .settings import router as settings_router
from .stats import router as stats_router
from .presets import router as presets_router
