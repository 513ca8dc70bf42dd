from __future__ import annotations

from flask import Request


def get_client_ip(request: Request, trust_proxy_headers: bool = True) -> str:
    if trust_proxy_headers:
        cf_ip = request.headers.get("CF-Connecting-IP")
        if cf_ip:
            return cf_ip.strip()

        xff = request.headers.get("X-Forwarded-For")
        if xff:
            parts = [p.strip() for p in xff.split(",") if p.strip()]
            if parts:
                return parts[0]

    return request.remote_addr or "unknown"
