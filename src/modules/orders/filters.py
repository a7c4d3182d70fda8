import django_filters

from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    client = django_filters.UUIDFilter(field_name="client_id")
    shipment = django_filters.CharFilter(field_name="shipment_id")
    tracking_number = django_filters.CharFilter(
        field_name="tracking_number", lookup_expr="icontains"
    )
    drawer = django_filters.CharFilter(method="filter_drawer")
    start_date = django_filters.DateFilter(field_name="order_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="order_date", lookup_expr="lte")

    class Meta:
        model = Order
        fields = [
            "status",
            "client",
            "shipment",
            "tracking_number",
            "drawer",
            "start_date",
            "end_date",
        ]

    def filter_drawer(self, queryset, name, value):
        return queryset.filter(storage_location__startswith=f"{value}-")
