import django_filters
from .models import PhotocopyRecord


class PhotocopyRecordFilter(django_filters.FilterSet):
    """Date range and user filters shared by the list, stats and report endpoints"""
    desde = django_filters.DateFilter(field_name='registrado_en', lookup_expr='date__gte')
    hasta = django_filters.DateFilter(field_name='registrado_en', lookup_expr='date__lte')
    usuario_id = django_filters.NumberFilter(field_name='usuario_id')
    tipo = django_filters.ChoiceFilter(choices=PhotocopyRecord.TYPE_CHOICES)
    doble_hoja = django_filters.BooleanFilter()

    class Meta:
        model = PhotocopyRecord
        fields = ['desde', 'hasta', 'usuario_id', 'tipo', 'doble_hoja']
