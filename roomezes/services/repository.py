"""
Accès aux données des prestataires: services (ménage, réparations...) et laundry_shops.
Le schéma des tables est géré côté Supabase, jamais créé à la volée ici.
"""
from typing import Any, Dict, List, Optional
import logging
import roomezes.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

SERVICES_TABLE = "services"
LAUNDRY_TABLE = "laundry_shops"

# module roomezes.services.repository
def insert_service(data: Dict[str, Any]) -> Dict[str, Any]:
    res = supabase_client.get_service_supabase().table(SERVICES_TABLE).insert(data).execute()
    return res.data[0] if res.data else {}

def list_services(service_type: Optional[str] = None) -> List[Dict[str, Any]]:
    try:
        query = supabase_client.get_supabase().table(SERVICES_TABLE).select("*").eq("available", True)
        if service_type:
            query = query.eq("service_type", service_type)
        res = query.order("name").execute()
        return res.data or []
    except Exception:
        logger.exception("services.repository.list_services failed service_type=%s", service_type)
        return []

def insert_laundry_shop(data: Dict[str, Any]) -> Dict[str, Any]:
    res = supabase_client.get_service_supabase().table(LAUNDRY_TABLE).insert(data).execute()
    return res.data[0] if res.data else {}

def list_laundry_shops() -> List[Dict[str, Any]]:
    """Toutes les laveries, plus récentes d'abord. Contrairement aux autres lectures, l'erreur remonte (500)."""
    res = (
        supabase_client.get_supabase()
        .table(LAUNDRY_TABLE)
        .select("*")
        .order("created_at", desc=True)
        .execute()
    )
    return res.data or []
