from django.http import HttpResponse
from drf_spectacular.utils import extend_schema
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny


@extend_schema(exclude=True)
@api_view(["GET"])
@permission_classes([AllowAny])
def marketplace_prometheus_metrics(request):
    """
    Exposes Prometheus metrics for the marketplace app (checkout, transitions, ratings).
    """
    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
