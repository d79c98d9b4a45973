import django_filters

from .models import DeveloperProfile


class DeveloperFilter(django_filters.FilterSet):
    skill = django_filters.CharFilter(method="filter_skill")
    max_rate = django_filters.NumberFilter(field_name="hourly_rate", lookup_expr="lte")

    class Meta:
        model = DeveloperProfile
        fields = ["availability"]

    def filter_skill(self, queryset, name, value):
        return queryset.filter(skills__icontains=value)
