from prometheus_client import Counter, Histogram


# Order Metrics
orders_placed_total = Counter("marketplace_orders_placed_total", "Total orders placed", ["status"])
order_value = Histogram(
    "marketplace_order_value",
    "Order value distribution",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, float("inf")],
)
vendor_group_failures_total = Counter(
    "marketplace_vendor_group_failures_total", "Vendor groups dropped during checkout", ["code"]
)
order_status_transitions_total = Counter(
    "marketplace_order_status_transitions_total", "Applied order status transitions", ["from_status", "to_status"]
)
order_transition_rejections_total = Counter(
    "marketplace_order_transition_rejections_total", "Rejected order status transitions", ["code"]
)

# Stock Metrics
stock_reservation_failures = Counter("marketplace_stock_reservation_failure", "Stock reservation failures")
stock_released_units_total = Counter("marketplace_stock_released_units_total", "Units returned to inventory")

# Rating Metrics
ratings_created_total = Counter("marketplace_ratings_created_total", "Ratings created", ["direction"])
duplicate_ratings_total = Counter("marketplace_duplicate_ratings_total", "Rejected duplicate ratings", ["direction"])

# Performance Metrics
checkout_duration = Histogram("marketplace_checkout_seconds", "Cart checkout time")
trust_score_recompute_duration = Histogram(
    "marketplace_trust_score_recompute_seconds", "Trust score recompute time", ["target"]
)
