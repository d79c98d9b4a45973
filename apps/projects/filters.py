import django_filters

from .models import Project


class ProjectFilter(django_filters.FilterSet):
    min_budget = django_filters.NumberFilter(field_name="budget_max", lookup_expr="gte")
    max_budget = django_filters.NumberFilter(field_name="budget_min", lookup_expr="lte")
    skill = django_filters.CharFilter(method="filter_skill")

    class Meta:
        model = Project
        fields = ["category", "duration_unit"]

    def filter_skill(self, queryset, name, value):
        return queryset.filter(skills__icontains=value)
