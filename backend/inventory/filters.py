import django_filters
from django.db.models import Q
from .models import InventoryItem


class InventoryItemFilter(django_filters.FilterSet):
    """Filters for the inventory item list"""
    search = django_filters.CharFilter(method='filter_search')
    categoria_id = django_filters.NumberFilter(field_name='categoria_id')
    trabajador_id = django_filters.NumberFilter(field_name='trabajador_id')
    grupo_id = django_filters.NumberFilter(field_name='grupo_id')
    estado = django_filters.ChoiceFilter(choices=InventoryItem.STATE_CHOICES)
    seccion = django_filters.CharFilter(field_name='seccion', lookup_expr='iexact')

    class Meta:
        model = InventoryItem
        fields = ['search', 'categoria_id', 'trabajador_id', 'grupo_id', 'estado', 'seccion']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(codigo__icontains=value) |
            Q(nombre__icontains=value) |
            Q(seccion__icontains=value)
        )
