import base64
from typing import Dict


def basic_auth_header(email: str, api_token: str) -> str:
    """Значение заголовка Authorization для Basic авторизации"""
    credentials = base64.b64encode(f"{email}:{api_token}".encode("utf-8"))
    return f"Basic {credentials.decode('ascii')}"


def json_headers(email: str, api_token: str) -> Dict[str, str]:
    """Заголовки JSON запроса с авторизацией"""
    return {
        "Authorization": basic_auth_header(email, api_token),
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
