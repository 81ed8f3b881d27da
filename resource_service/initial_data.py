import logging
from resource_service.services.dispatch_service import Dispatcher

logger = logging.getLogger(__name__)

# Demo records, created only when SEED_DEMO_DATA is set
DEMO_DATA = {
    "orders": [
        {"item": "Laptop", "price": 1200, "owner": "user_1"},
        {"item": "Mouse", "price": 25, "owner": "user_2"},
        {"item": "Keyboard", "price": 100, "owner": "user_1"},
    ],
    "bom": [
        {"product": "Laptop", "components": ["board", "screen", "battery"]},
    ],
    "products": [
        {"name": "Laptop", "sku": "LP-001"},
        {"name": "Mouse", "sku": "MS-001"},
    ],
    "users": [
        {"name": "Alice"},
        {"name": "Bob"},
        {"name": "Charlie"},
    ],
}


def init_demo_data(dispatcher: Dispatcher) -> int:
    """
    Fills empty stores with DEMO_DATA.
    Stores that already hold records are left alone. Returns the number of records created.
    """
    created = 0
    for resource_type, records in DEMO_DATA.items():
        handler_set = dispatcher.handler_sets.get(resource_type)
        if handler_set is None:
            logger.info("Seeding: '%s' is not configured, skipping", resource_type)
            continue
        if len(handler_set.store):
            logger.info("Seeding: '%s' already has data, skipping", resource_type)
            continue

        for payload in records:
            handler_set.create(payload)
            created += 1
        logger.info("Seeding: created %d %s", len(records), resource_type)

    return created
