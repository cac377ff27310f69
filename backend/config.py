import os
from pathlib import Path

from dotenv import load_dotenv
from platformdirs import user_data_dir

load_dotenv()

# 存储配置
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")  # memory | mongo
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "meditation_timer")
MONGODB_TIMEOUT_MS = int(os.getenv("MONGODB_TIMEOUT_MS", "3000"))

# 服务器配置
API_PREFIX = "/api"
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# 客户端配置
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "5"))
APP_DATA_DIR = Path(os.getenv("APP_DATA_DIR", user_data_dir("meditation_timer")))
ANONYMOUS_ID_PATH = APP_DATA_DIR / "anonymous_user_id"
SETTINGS_FALLBACK_PATH = APP_DATA_DIR / "settings_fallback.json"

# 计时配置
TICK_INTERVAL_SECONDS = float(os.getenv("TICK_INTERVAL_SECONDS", "0.1"))
COMPLETION_THRESHOLD = 90  # 完成率达到该百分比即视为完成
