# Generated manually for the initial schema

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('access', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PaperType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('description', models.TextField(blank=True)),
                ('unit_cost', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'tipos_hoja',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='PhotocopyRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('cantidad', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('multiplicador', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('tipo', models.CharField(choices=[('bn', 'Black & White'), ('color', 'Color')], default='bn', max_length=10)),
                ('doble_hoja', models.BooleanField(default=False)),
                ('comentario', models.TextField(blank=True, default='')),
                ('total_hojas', models.PositiveIntegerField(default=0, editable=False)),
                ('registrado_en', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('grupo', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='photocopies', to='access.workgroup')),
                ('tipo_hoja', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='records', to='photocopies.papertype')),
                ('usuario', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='photocopies', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'fotocopias',
                'ordering': ['-registrado_en', '-id'],
                'indexes': [
                    models.Index(fields=['usuario', 'registrado_en'], name='fotocopias_usuario_4f1d2c_idx'),
                    models.Index(fields=['tipo'], name='fotocopias_tipo_8e3a51_idx'),
                ],
            },
        ),
    ]
