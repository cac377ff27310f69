from fastapi import Request

from storage import SessionStorage


def get_storage(request: Request) -> SessionStorage:
    """从应用状态获取存储实例"""
    return request.app.state.storage
