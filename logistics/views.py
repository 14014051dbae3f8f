"""
Logistics App Views - Admin Order Endpoints
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsAdmin
from core.views import no_store

from .serializers import AssignOrderSerializer
from .services.orders import OrderService


class OrderListView(APIView):
    """
    Orders for the dashboard, newest first.

    GET /api/orders/

    Response is never cached; the dashboard polls this endpoint.
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        return no_store(Response(OrderService().list_orders()))


class OrderDetailView(APIView):
    """
    GET /api/orders/<id>/
    """
    permission_classes = [IsAdmin]

    def get(self, request, order_id):
        return no_store(Response(OrderService().get_order_detail(str(order_id))))


class OrderAssignView(APIView):
    """
    Assign an order to a courier, or remove the assignment.

    POST   /api/orders/assign/  { "order_id": "...", "repartidor_id": "..." }
    DELETE /api/orders/assign/?order_id=...
    """
    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = AssignOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = OrderService().assign(
            serializer.validated_data['order_id'],
            serializer.validated_data['repartidor_id'],
        )
        return Response(result, status=status.HTTP_200_OK)

    def delete(self, request):
        order_id = request.query_params.get('order_id', '')
        return Response(OrderService().unassign(order_id))
