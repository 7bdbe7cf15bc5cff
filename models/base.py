from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class OrderStatus(str, enum.Enum):
    """Shipment status carried by tracked orders and their checkpoints.

    Any status may follow any other; no transition rules are enforced.
    """
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    IN_WAREHOUSE = "IN_WAREHOUSE"
    IN_TRANSIT = "IN_TRANSIT"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
