"""
Liveness probe for pooled connections.
"""

import logging
from typing import Any

from dbmapper.models import ProductTypeEnum

from .connect import execute

_log = logging.getLogger(__name__)


def health_check(conn: Any, product_type: ProductTypeEnum) -> bool:
    """True when *conn* answers ``SELECT 1``; any driver error counts as dead."""
    try:
        cur = execute(conn, "SELECT 1", product_type=product_type)
    except Exception as e:
        _log.debug("Health check on %s connection failed: %s", product_type.value, e)
        return False
    try:
        return cur.fetchone() is not None
    except Exception as e:
        _log.debug("Health check fetch on %s connection failed: %s", product_type.value, e)
        return False
    finally:
        try:
            cur.close()
        except Exception as e:
            _log.debug("Closing health check cursor failed: %s", e)
