"""Minimal example for an in-memory storage service."""

from kv_storage import AttributeFilter, AttributeSort, InMemoryStorageService


def main() -> None:
    """Store a few orders, watch the listeners fire and query them back."""
    with InMemoryStorageService() as service:
        orders = service.get_cache("orders", dict)
        orders.add_object_created_listener(lambda order: print("created:", order))
        orders.add_object_updated_listener(lambda previous: print("replaced:", previous))
        orders.add_object_removed_listener(lambda key: print("removed:", key))

        orders.put("o1", {"status": "open", "amount": 12})
        orders.put("o2", {"status": "closed", "amount": 30})
        orders.put("o3", {"status": "open", "amount": 18})
        orders.put("o1", {"status": "open", "amount": 15})

        open_orders = (
            orders.query()
            .filter([AttributeFilter.of("equal", "status", "open")])
            .sort([AttributeSort.desc("amount")])
            .execute()
        )
        print("open orders:", open_orders)

        orders.remove("o2")
        print("keys:", list(orders))


if __name__ == "__main__":
    main()
