# -*- coding: utf-8 -*-
import os
import requests

from iti_admissions.config import SiteConfig

API_URL = os.getenv("API_URL", "http://api:8000")
VER = "/v1"
BASE = f"{API_URL}{VER}"
JSON = {"Content-Type": "application/json"}


def _error(r: requests.Response) -> str:
    try:
        detail = r.json().get("detail")
    except ValueError:
        return f"HTTP {r.status_code}: {r.text}"
    if isinstance(detail, dict):
        return detail.get("message") or str(detail)
    if isinstance(detail, list):
        return "; ".join(str(d.get("msg", d)) for d in detail)
    return detail or f"HTTP {r.status_code}"


# ---------------------------
# HTTP helpers
# ---------------------------
def post(path: str, payload: dict, timeout=45):
    try:
        r = requests.post(f"{BASE}{path}", headers=JSON, json=payload, timeout=timeout)
        if r.ok:
            return r.json(), None
        return None, _error(r)
    except Exception as e:
        return None, str(e)

def put(path: str, payload: dict, timeout=45):
    try:
        r = requests.put(f"{BASE}{path}", headers=JSON, json=payload, timeout=timeout)
        if r.ok:
            return r.json(), None
        return None, _error(r)
    except Exception as e:
        return None, str(e)

def get(path: str, params: dict | None = None, timeout=30):
    try:
        r = requests.get(f"{BASE}{path}", params=params, timeout=timeout)
        if r.ok:
            return r.json(), None
        return None, _error(r)
    except Exception as e:
        return None, str(e)

def get_bytes(path: str, params: dict | None = None, timeout=60):
    try:
        r = requests.get(f"{BASE}{path}", params=params, timeout=timeout)
        if r.ok:
            return r.content, None
        return None, _error(r)
    except Exception as e:
        return None, str(e)

def post_multipart(path: str, fields: dict, files: dict, timeout=120):
    try:
        r = requests.post(f"{BASE}{path}", data=fields, files=files, timeout=timeout)
        if r.ok:
            return r.json(), None
        return None, _error(r)
    except Exception as e:
        return None, str(e)


def site_config() -> SiteConfig:
    """Institute details from the API, falling back to built-in defaults."""
    data, err = get("/site", timeout=10)
    return SiteConfig().with_overrides(None if err else data)
