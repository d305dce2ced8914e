import django_filters

from modules.orders.constants import OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(
        field_name="order_status", choices=OrderStatus.choices
    )
    is_paid = django_filters.BooleanFilter(field_name="is_paid")
    is_delivered = django_filters.BooleanFilter(field_name="is_delivered")
    payment_method = django_filters.CharFilter(
        field_name="payment_method", lookup_expr="iexact"
    )
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    min_total = django_filters.NumberFilter(field_name="total_price", lookup_expr="gte")
    max_total = django_filters.NumberFilter(field_name="total_price", lookup_expr="lte")

    class Meta:
        model = Order
        fields = [
            "status",
            "is_paid",
            "is_delivered",
            "payment_method",
            "start_date",
            "end_date",
            "min_total",
            "max_total",
        ]
