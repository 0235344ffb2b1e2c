from rest_framework import serializers
from backend.workers.models import Worker
from .models import InventoryCategory, InventoryItem


class InventoryCategorySerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = InventoryCategory
        fields = ['id', 'nombre', 'grupo', 'item_count', 'created_at']
        read_only_fields = ['grupo', 'created_at']

    def validate_nombre(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value


class InventoryItemSerializer(serializers.ModelSerializer):
    categoria_id = serializers.PrimaryKeyRelatedField(
        queryset=InventoryCategory.objects.all(), source='categoria', required=False, allow_null=True
    )
    categoria_nombre = serializers.CharField(source='categoria.nombre', read_only=True, default=None)
    trabajador_id = serializers.PrimaryKeyRelatedField(
        queryset=Worker.objects.all(), source='trabajador', required=False, allow_null=True
    )
    trabajador_nombre = serializers.CharField(source='trabajador.full_name', read_only=True, default=None)
    grupo_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            'id', 'codigo', 'nombre', 'categoria_id', 'categoria_nombre', 'estado', 'seccion',
            'trabajador_id', 'trabajador_nombre', 'posicion', 'fecha_ingreso', 'grupo_id',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_codigo(self, value):
        value = value.strip().upper()
        if not value:
            raise serializers.ValidationError("Code is required")
        return value

    def validate(self, attrs):
        grupo = self.context.get('grupo') or getattr(self.instance, 'grupo', None)
        categoria = attrs.get('categoria')
        if categoria is not None and grupo is not None and categoria.grupo_id != grupo.id:
            raise serializers.ValidationError({'categoria_id': "Category belongs to another group"})
        trabajador = attrs.get('trabajador')
        if trabajador is not None and grupo is not None and trabajador.grupo_id != grupo.id:
            raise serializers.ValidationError({'trabajador_id': "Worker belongs to another group"})
        # assigning a worker marks the item as assigned unless a state is given
        if trabajador is not None and 'estado' not in attrs and (self.instance is None or self.instance.estado == 'disponible'):
            attrs['estado'] = 'asignado'
        return attrs


class SectionUpdateSerializer(serializers.Serializer):
    seccion = serializers.CharField(max_length=100)
    posicion = serializers.IntegerField(min_value=0, required=False)
