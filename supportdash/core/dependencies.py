import httpx
from fastapi import Request


def get_http_client(request: Request) -> httpx.AsyncClient:
    # Built once in the app lifespan, shared by every request
    return request.app.state.http_client
