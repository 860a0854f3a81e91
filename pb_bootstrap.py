# ==== pb_bootstrap.py (standalone script) ====
# Creates/updates the tasks collection on a PocketBase server via the Admin API.
# Run with:
#   TODO_BASE_URL=http://127.0.0.1:8090 PB_ADMIN_EMAIL=... PB_ADMIN_PASSWORD=... python pb_bootstrap.py

import logging
import os
import sys

import requests

from core import config
from core.logging_setup import setup_logging

logger = logging.getLogger("pb_bootstrap")

# the app has no login: records are open to anyone who can reach the server
PUBLIC_RULE = ""


def die(msg):
    logger.error(msg)
    sys.exit(1)


class PBAdmin:
    def __init__(self, base):
        self.base = base.rstrip("/")
        self.s = requests.Session()

    def _call(self, method, path, what, *, allow_404=False, **kwargs):
        try:
            r = self.s.request(method, f"{self.base}{path}", timeout=20, **kwargs)
        except requests.RequestException as e:
            die(f"[{what}] {e}")
        if allow_404 and r.status_code == 404:
            return None
        if not r.ok:
            die(f"[{what}] {r.status_code}: {r.text}")
        return r.json()

    def admin_login(self, email, password):
        data = self._call("POST", "/api/admins/auth-with-password", "LOGIN",
                          json={"identity": email, "password": password})
        tok = data.get("token")
        if not tok:
            die("[LOGIN] missing token")
        self.s.headers.update({"Authorization": f"Bearer {tok}"})
        logger.info("admin login ok")

    def get_collection(self, name_or_id):
        return self._call("GET", f"/api/collections/{name_or_id}", f"GET {name_or_id}", allow_404=True)

    def create_collection(self, payload):
        return self._call("POST", "/api/collections", f"CREATE {payload.get('name')}", json=payload)

    def update_collection(self, id_or_name, payload):
        return self._call("PATCH", f"/api/collections/{id_or_name}", f"UPDATE {id_or_name}", json=payload)


def spec_tasks(name: str = "tasks"):
    return {
        "name": name,
        "type": "base",
        "schema": [
            {"name": "text", "type": "text", "required": True, "options": {"min": 1, "max": 500}},
            {"name": "completed", "type": "bool", "required": False, "options": {}},
            # local date-time text (YYYY-MM-DDTHH:MM); sorts chronologically as text
            {"name": "deadline", "type": "text", "required": True,
             "options": {"pattern": r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2})?$"}},
        ],
        "indexes": [
            f"CREATE INDEX idx_{name}_deadline ON {name} (deadline)",
        ],
        "listRule": PUBLIC_RULE,
        "viewRule": PUBLIC_RULE,
        "createRule": PUBLIC_RULE,
        "updateRule": PUBLIC_RULE,
        "deleteRule": PUBLIC_RULE,
    }


def upsert_collection(pb: PBAdmin, spec: dict):
    existing = pb.get_collection(spec["name"])
    if not existing:
        return pb.create_collection(spec)
    cid = existing.get("id") or spec["name"]
    # keep the name stable when patching by id
    spec_with_id_name = spec.copy()
    spec_with_id_name["id"] = cid
    spec_with_id_name["name"] = existing["name"]
    return pb.update_collection(cid, spec_with_id_name)


def main():
    setup_logging(log_dir=config.LOG_DIR)
    email = os.getenv("PB_ADMIN_EMAIL")
    password = os.getenv("PB_ADMIN_PASSWORD")
    if not email or not password:
        die("PB_ADMIN_EMAIL and PB_ADMIN_PASSWORD must be set")

    pb = PBAdmin(config.BASE_URL)
    pb.admin_login(email, password)

    col = upsert_collection(pb, spec_tasks(config.COLLECTION))
    logger.info("collection %s ready (%s)", config.COLLECTION, col.get("id"))


if __name__ == "__main__":
    main()
