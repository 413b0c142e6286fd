import logging

from sqlalchemy.orm import Session

from app.models.models import Agent, MarketplaceCategory
from app.utils.config import SEED_AGENTS, SEED_CATEGORIES

logger = logging.getLogger(__name__)


def seed_database(db: Session):
    if db.query(Agent).count() == 0:
        for agent in SEED_AGENTS:
            db.add(Agent(is_active=True, **agent))
        logger.info("Seeded %d agents", len(SEED_AGENTS))
    if db.query(MarketplaceCategory).count() == 0:
        for category in SEED_CATEGORIES:
            db.add(MarketplaceCategory(**category))
        logger.info("Seeded %d marketplace categories", len(SEED_CATEGORIES))
    db.commit()
