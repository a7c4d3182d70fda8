import django_filters

from modules.clients.models import Client


class ClientFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    phone = django_filters.CharFilter(field_name="phone", lookup_expr="icontains")

    class Meta:
        model = Client
        fields = ["name", "phone"]
