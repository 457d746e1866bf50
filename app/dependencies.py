from fastapi import Request, WebSocket

from vidsentry.client_manager import ClientManager


def get_client_manager(request: Request) -> ClientManager:
    return request.app.state.client_manager


def get_ws_client_manager(websocket: WebSocket) -> ClientManager:
    return websocket.app.state.client_manager
