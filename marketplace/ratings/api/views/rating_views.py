from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import VendorRequired
from infrastructure.container import container
from marketplace.api.params import query_int
from marketplace.api.serializers import ErrorResponseSerializer
from marketplace.ratings.api.serializers import (
    BusinessRatingSummarySerializer,
    BusinessRatingsResponseSerializer,
    ConsumerTrustScoreSerializer,
    CreateRatingRequestSerializer,
    RatingSerializer,
)


class RatingViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="ratings_create",
        summary="Rate the other party of a delivered order",
        description="""
        **What it receives:**
        - `order_id`: a delivered order the caller took part in
        - `direction`: `buyer_to_vendor` or `vendor_to_buyer` (defaults from the caller's role)
        - `stars` (1-5), optional `review`, and `criteria` with every key of the direction

        **What it returns:**
        - The stored rating. The ratee's aggregate is recomputed in the same transaction.
        """,
        request=CreateRatingRequestSerializer,
        responses={
            201: OpenApiResponse(response=RatingSerializer, description="Rating created"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid input or order not delivered"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Caller may not rate in this direction"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Already rated in this direction"),
        },
        tags=["Marketplace - Ratings"],
    )
    def create(self, request):
        serializer = CreateRatingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        rating = container.rating_engine().create_rating(
            order_id=data["order_id"],
            rater=request.user,
            direction=data.get("direction"),
            stars=data["stars"],
            review=data.get("review", ""),
            criteria=dict(data["criteria"]),
        )
        return Response(RatingSerializer(rating).data, status=status.HTTP_201_CREATED)


class BusinessRatingsView(APIView):
    """Public list of buyer ratings for one vendor."""

    permission_classes = [AllowAny]

    @extend_schema(
        operation_id="business_ratings_list",
        summary="List a vendor's ratings with its aggregate",
        parameters=[
            OpenApiParameter(name="min_stars", type=int, description="Only ratings with at least this many stars"),
            OpenApiParameter(name="max_stars", type=int, description="Only ratings with at most this many stars"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="page_size", type=int, description="Items per page (default: 20, max: 100)"),
        ],
        responses={
            200: OpenApiResponse(response=BusinessRatingsResponseSerializer, description="Ratings retrieved"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid filter"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Business not found"),
        },
        tags=["Marketplace - Ratings"],
    )
    def get(self, request, business_id):
        result = container.rating_engine().list_business_ratings(
            business_id,
            min_stars=query_int(request, "min_stars"),
            max_stars=query_int(request, "max_stars"),
            page=query_int(request, "page", 1),
            page_size=query_int(request, "page_size"),
        )
        result["business"] = BusinessRatingSummarySerializer(result["business"]).data
        result["results"] = RatingSerializer(result["results"], many=True).data
        return Response(result, status=status.HTTP_200_OK)


class ConsumerTrustScoreView(APIView):
    """A buyer's trust score, visible to business accounts and admins."""

    permission_classes = [VendorRequired]

    @extend_schema(
        operation_id="consumer_trust_score_retrieve",
        summary="Get a consumer's trust score",
        responses={
            200: OpenApiResponse(response=ConsumerTrustScoreSerializer, description="Trust score retrieved"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Business or admin account required"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Consumer not found"),
        },
        tags=["Marketplace - Ratings"],
    )
    def get(self, request, consumer_id):
        score = container.rating_engine().get_consumer_trust_score(consumer_id)
        return Response(ConsumerTrustScoreSerializer(score).data, status=status.HTTP_200_OK)
