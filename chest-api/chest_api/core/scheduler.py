"""
APScheduler pour les tâches automatiques
- Expiration du cache des rôles Discord
"""
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from chest_api.core.config import settings

logger = logging.getLogger(__name__)

# Instance globale du scheduler
scheduler = BackgroundScheduler()


def expire_role_cache():
    """Drop role-cache entries older than the stale window."""
    from chest_api.services.role_cache import role_cache

    try:
        removed = role_cache.expire()
        if removed:
            logger.info(f"[Scheduler] Expired {removed} role cache entries")
    except Exception as e:
        logger.error(f"[Scheduler] Error in expire_role_cache: {e}")


def setup_jobs():
    """Configure tous les jobs planifiés"""
    scheduler.add_job(
        expire_role_cache,
        trigger=IntervalTrigger(minutes=settings.ROLE_CACHE_EVICT_MINUTES),
        id="role_cache_expiry",
        name="Expiration cache des rôles Discord",
        replace_existing=True,
    )
    logger.info("[Scheduler] Jobs configurés (1 job)")


def start_scheduler():
    """Démarre le scheduler au lancement de l'app"""
    if not scheduler.running:
        setup_jobs()
        scheduler.start()
        logger.info("[Scheduler] Démarré")


def stop_scheduler():
    """Arrête proprement le scheduler"""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("[Scheduler] Arrêté")
