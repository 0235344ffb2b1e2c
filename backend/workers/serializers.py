from rest_framework import serializers
from .models import Department, Occupation, Worker


class DepartmentSerializer(serializers.ModelSerializer):
    nombre = serializers.CharField(max_length=100)

    class Meta:
        model = Department
        fields = ['id', 'nombre', 'grupo', 'created_at']
        read_only_fields = ['grupo', 'created_at']

    def validate_nombre(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value


class OccupationSerializer(serializers.ModelSerializer):
    nombre = serializers.CharField(max_length=100)

    class Meta:
        model = Occupation
        fields = ['id', 'nombre', 'grupo', 'created_at']
        read_only_fields = ['grupo', 'created_at']

    def validate_nombre(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value


class WorkerSerializer(serializers.ModelSerializer):
    """
    ``departamento`` is exchanged by name; an unknown name creates the
    department in the worker's group.
    """
    departamento = serializers.CharField(source='departamento.nombre', required=False, allow_blank=True, allow_null=True)
    departamento_id = serializers.IntegerField(read_only=True)
    grupo_id = serializers.IntegerField(read_only=True)
    usuario_id = serializers.IntegerField(read_only=True)
    ropera = serializers.IntegerField(min_value=1, max_value=9999, required=False, allow_null=True)

    class Meta:
        model = Worker
        fields = [
            'id', 'nombres', 'apellidos', 'email', 'rut', 'ocupacion', 'departamento', 'departamento_id',
            'ropera', 'fecha_contratacion', 'activo', 'grupo_id', 'usuario_id', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_nombres(self, value):
        if not value.strip():
            raise serializers.ValidationError("First names are required")
        return value.strip()

    def validate_apellidos(self, value):
        if not value.strip():
            raise serializers.ValidationError("Last names are required")
        return value.strip()

    def validate_rut(self, value):
        return value.strip() or None if value else None

    def _department(self, grupo, validated_data):
        department_data = validated_data.pop('departamento', None)
        name = (department_data or {}).get('nombre')
        if not name or not name.strip():
            return None
        department, _ = Department.objects.get_or_create(nombre=name.strip(), grupo=grupo)
        return department

    def create(self, validated_data):
        grupo = validated_data['grupo']
        validated_data['departamento'] = self._department(grupo, validated_data)
        return super().create(validated_data)

    def update(self, instance, validated_data):
        if 'departamento' in validated_data:
            validated_data['departamento'] = self._department(instance.grupo, validated_data)
        return super().update(instance, validated_data)


class WorkerStatusSerializer(serializers.Serializer):
    activo = serializers.BooleanField()
