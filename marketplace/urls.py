from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api.views import prometheus_metrics
from .ordering.api.views.order_views import OrderViewSet
from .ratings.api.views.rating_views import BusinessRatingsView, ConsumerTrustScoreView, RatingViewSet

# Create the main router
router = DefaultRouter()
router.register(r"orders", OrderViewSet, basename="order")
router.register(r"ratings", RatingViewSet, basename="rating")

app_name = "marketplace"

urlpatterns = [
    # Main API routes
    path("", include(router.urls)),
    path("businesses/<uuid:business_id>/ratings/", BusinessRatingsView.as_view(), name="business-ratings"),
    path("consumers/<uuid:consumer_id>/trust-score/", ConsumerTrustScoreView.as_view(), name="consumer-trust-score"),
    # Prometheus metrics endpoint
    path("metrics/", prometheus_metrics.marketplace_prometheus_metrics, name="marketplace-metrics"),
]
