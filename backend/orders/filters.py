import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=Order.OrderStatus.choices)
    order_type = django_filters.ChoiceFilter(choices=Order.OrderType.choices)
    table = django_filters.NumberFilter(field_name="table_id")
    created_at__gte = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_at__lte = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='lte')
    completed_at__gte = django_filters.DateTimeFilter(field_name='completed_at', lookup_expr='gte')
    completed_at__lte = django_filters.DateTimeFilter(field_name='completed_at', lookup_expr='lte')

    class Meta:
        model = Order
        fields = ["status", "order_type", "table"]
