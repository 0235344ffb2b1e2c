from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Department(models.Model):
    nombre = models.CharField(max_length=100)
    grupo = models.ForeignKey('access.WorkGroup', on_delete=models.CASCADE, related_name='departments', null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.nombre

    class Meta:
        db_table = 'departamentos'
        ordering = ['nombre']
        unique_together = [['nombre', 'grupo']]


class Occupation(models.Model):
    """Custom occupation added by a group on top of the default list"""
    DEFAULT_OCCUPATIONS = [
        'Administrador/a', 'Analista', 'Asistente', 'Auxiliar', 'Coordinador/a',
        'Director/a', 'Encargado/a', 'Especialista', 'Gerente', 'Jefe/a',
        'Operador/a', 'Supervisor/a', 'Técnico/a',
    ]

    nombre = models.CharField(max_length=100)
    grupo = models.ForeignKey('access.WorkGroup', on_delete=models.CASCADE, related_name='occupations', null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.nombre

    class Meta:
        db_table = 'ocupaciones_personalizadas'
        ordering = ['nombre']
        unique_together = [['nombre', 'grupo']]


class Worker(models.Model):
    """Employee of a group"""
    nombres = models.CharField(max_length=100)
    apellidos = models.CharField(max_length=100)
    email = models.EmailField(blank=True, default='')
    rut = models.CharField(max_length=20, unique=True, null=True, blank=True)
    ocupacion = models.CharField(max_length=100, blank=True, default='')
    departamento = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name='workers')
    ropera = models.PositiveIntegerField(
        null=True, blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(9999)],
        help_text="Locker number (1-9999)"
    )
    fecha_contratacion = models.DateField(null=True, blank=True)
    activo = models.BooleanField(default=True)
    grupo = models.ForeignKey('access.WorkGroup', on_delete=models.CASCADE, related_name='workers')
    usuario = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='worker_profile')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def full_name(self):
        return f"{self.nombres} {self.apellidos}".strip()

    def __str__(self):
        return self.full_name

    class Meta:
        db_table = 'trabajadores'
        ordering = ['nombres', 'apellidos']
