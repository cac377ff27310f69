import logging
import secrets
import string
import time
from pathlib import Path
from typing import Optional

from config import ANONYMOUS_ID_PATH

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def random_suffix(length: int = 9) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_local_id(prefix: str) -> str:
    """生成本地标识，格式 <prefix>_<毫秒时间戳>_<随机串>"""
    return f"{prefix}_{int(time.time() * 1000)}_{random_suffix()}"


def get_anonymous_user_id(path: Path = ANONYMOUS_ID_PATH) -> str:
    """读取本机匿名用户标识，不存在时生成并保存"""
    path = Path(path)
    if path.exists():
        stored = path.read_text(encoding="utf-8").strip()
        if stored:
            return stored

    anonymous_id = generate_local_id("anon")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(anonymous_id, encoding="utf-8")
    logger.info("Created anonymous user id %s", anonymous_id)
    return anonymous_id


def resolve_user_id(user_id: Optional[str] = None, path: Path = ANONYMOUS_ID_PATH) -> str:
    return user_id or get_anonymous_user_id(path)
