from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from .calculations import printed_pages, required_sheets


class PaperType(models.Model):
    """Paper stock a job can be printed on"""
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    unit_cost = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'tipos_hoja'
        ordering = ['name']


class PhotocopyRecord(models.Model):
    """One photocopy job registered at the counter"""
    TYPE_CHOICES = [
        ('bn', 'Black & White'),
        ('color', 'Color'),
    ]

    cantidad = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    multiplicador = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    tipo = models.CharField(max_length=10, choices=TYPE_CHOICES, default='bn')
    doble_hoja = models.BooleanField(default=False)
    tipo_hoja = models.ForeignKey(PaperType, on_delete=models.SET_NULL, null=True, blank=True, related_name='records')
    comentario = models.TextField(blank=True, default='')
    total_hojas = models.PositiveIntegerField(default=0, editable=False)
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='photocopies')
    grupo = models.ForeignKey('access.WorkGroup', on_delete=models.PROTECT, related_name='photocopies')
    registrado_en = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def total_paginas(self):
        return printed_pages(self.cantidad, self.multiplicador)

    def describe(self):
        """Short human summary used in audit entries"""
        label = 'B/N' if self.tipo == 'bn' else 'Color'
        text = f'{self.cantidad} {label}'
        if self.multiplicador > 1:
            text += f' x{self.multiplicador}'
        if self.doble_hoja:
            text += ' (doble hoja)'
        return text

    def save(self, *args, **kwargs):
        self.total_hojas = required_sheets(self.cantidad, self.multiplicador, self.doble_hoja)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'total_hojas' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['total_hojas']
        super().save(*args, **kwargs)

    def __str__(self):
        return f"#{self.id} {self.describe()}"

    class Meta:
        db_table = 'fotocopias'
        ordering = ['-registrado_en', '-id']
        indexes = [
            models.Index(fields=['usuario', 'registrado_en'], name='fotocopias_usuario_4f1d2c_idx'),
            models.Index(fields=['tipo'], name='fotocopias_tipo_8e3a51_idx'),
        ]
