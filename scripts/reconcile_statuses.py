"""
Script to run one status reconciliation pass over all tracked orders
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from core.config import settings
from core.logging import setup_logging
from tracking.scheduler import build_orchestrator, reconcile_statuses

setup_logging()
logger = logging.getLogger(__name__)


async def run_reconciliation():
    """Repair tracked orders whose status drifted from their last checkpoint"""
    
    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=False,
    )
    
    AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    
    try:
        orchestrator = build_orchestrator(AsyncSessionLocal)
        summary = await reconcile_statuses(orchestrator)
        logger.info(
            f"Reconciliation completed: checked={summary['checked']}, "
            f"repaired={summary['repaired']}, failed={summary['failed']}"
        )
    except Exception as e:
        logger.error(f"Reconciliation error: {str(e)}")
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(run_reconciliation())
