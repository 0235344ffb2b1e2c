# Generated manually for the initial schema

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('access', '0001_initial'),
        ('workers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryCategory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nombre', models.CharField(max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('grupo', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inventory_categories', to='access.workgroup')),
            ],
            options={
                'db_table': 'tipos_items',
                'ordering': ['nombre'],
                'unique_together': {('nombre', 'grupo')},
            },
        ),
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('codigo', models.CharField(help_text='CCI code', max_length=50, unique=True)),
                ('nombre', models.CharField(max_length=150)),
                ('estado', models.CharField(choices=[('disponible', 'Available'), ('asignado', 'Assigned'), ('mantenimiento', 'Maintenance'), ('baja', 'Retired')], default='disponible', max_length=20)),
                ('seccion', models.CharField(blank=True, default='', max_length=100)),
                ('posicion', models.PositiveIntegerField(default=0)),
                ('fecha_ingreso', models.DateField(default=django.utils.timezone.localdate)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('categoria', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='items', to='inventory.inventorycategory')),
                ('grupo', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inventory_items', to='access.workgroup')),
                ('trabajador', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_items', to='workers.worker')),
            ],
            options={
                'db_table': 'items',
                'ordering': ['seccion', 'posicion', 'codigo'],
                'indexes': [
                    models.Index(fields=['grupo', 'estado'], name='items_grupo_e_2b7c4d_idx'),
                    models.Index(fields=['seccion', 'posicion'], name='items_seccion_9a1e63_idx'),
                ],
            },
        ),
    ]
