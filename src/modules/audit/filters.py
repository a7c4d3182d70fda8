import django_filters

from modules.audit.models import ActivityLogEntry


class ActivityLogFilter(django_filters.FilterSet):
    user = django_filters.CharFilter(field_name="user", lookup_expr="iexact")
    action = django_filters.CharFilter(field_name="action", lookup_expr="icontains")
    start_date = django_filters.DateFilter(field_name="timestamp", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="timestamp", lookup_expr="date__lte")

    class Meta:
        model = ActivityLogEntry
        fields = ["user", "action", "entity_type", "entity_id"]
