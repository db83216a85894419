from urllib.parse import urlparse
import socket
import roomezes.infra.supabase_client as supabase_client

CHECKED_TABLES = ("canteens", "canteen_items", "canteen_orders")

def _check_table(client, name: str):
    try:
        res = client.table(name).select("*").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}

# module roomezes.health.service
def health_supabase_info():
    """Diagnostic Supabase: résolution DNS de l'hôte puis lecture d'une ligne par table."""
    from roomezes.config import SUPABASE_URL
    parsed = urlparse(SUPABASE_URL) if SUPABASE_URL else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except OSError as e:
            dns_ok = False
            dns_error = str(e)

    info = {
        "supabase_url": SUPABASE_URL,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        client = supabase_client.get_supabase()
        for t in CHECKED_TABLES:
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info
