from rest_framework import serializers
from .models import PaperType, PhotocopyRecord


class PaperTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaperType
        fields = ['id', 'name', 'description', 'unit_cost', 'is_active']


class PhotocopyRecordSerializer(serializers.ModelSerializer):
    usuario_id = serializers.IntegerField(source='usuario.id', read_only=True)
    usuario_nombre = serializers.CharField(source='usuario.display_name', read_only=True)
    grupo_nombre = serializers.CharField(source='grupo.name', read_only=True)
    tipo_hoja_id = serializers.PrimaryKeyRelatedField(
        source='tipo_hoja', queryset=PaperType.objects.filter(is_active=True),
        required=False, allow_null=True
    )
    tipo_hoja_nombre = serializers.CharField(source='tipo_hoja.name', read_only=True, default=None)
    total_paginas = serializers.IntegerField(read_only=True)
    registrado_en = serializers.DateTimeField(read_only=True, format='%Y-%m-%d %H:%M:%S')

    class Meta:
        model = PhotocopyRecord
        fields = [
            'id', 'cantidad', 'multiplicador', 'tipo', 'doble_hoja', 'tipo_hoja_id', 'tipo_hoja_nombre',
            'comentario', 'total_hojas', 'total_paginas', 'usuario_id', 'usuario_nombre',
            'grupo_nombre', 'registrado_en',
        ]
        read_only_fields = ['total_hojas']

    def validate_cantidad(self, value):
        if value is None or value < 1:
            raise serializers.ValidationError("Quantity must be at least 1")
        return value

    def validate_multiplicador(self, value):
        if value is None or value < 1:
            raise serializers.ValidationError("Multiplier must be at least 1")
        return value

    def validate_comentario(self, value):
        return (value or '').strip()


class PriceConfigSerializer(serializers.Serializer):
    precio_bn = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    precio_color = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    precio_hoja = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    precio_resma = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    fotocopia_gracia_bn = serializers.IntegerField(min_value=0, required=False)
    fotocopia_gracia_color = serializers.IntegerField(min_value=0, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one price field is required")
        return attrs
