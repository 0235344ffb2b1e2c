from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from backend.access.models import AtomicPermission, SystemModule
from backend.access.services import MODULE_PERMISSION_CODES, get_owner_role, get_worker_role
from backend.photocopies.calculations import DEFAULT_PRICES
from backend.photocopies.models import PaperType
from backend.photocopies.prices import get_price_config, save_price_config


class Command(BaseCommand):
    help = 'Seed system modules, atomic permissions, base roles, paper types and default prices'

    MODULES = [
        {'code': 'fotocopias', 'name': 'Fotocopias', 'icon': 'printer', 'order': 1},
        {'code': 'trabajadores', 'name': 'Trabajadores', 'icon': 'users', 'order': 2},
        {'code': 'inventario', 'name': 'Inventario', 'icon': 'box', 'order': 3},
        {'code': 'configuracion', 'name': 'Configuración', 'icon': 'settings', 'order': 4},
        {'code': 'auditoria', 'name': 'Auditoría', 'icon': 'history', 'order': 5},
    ]

    PAPER_TYPES = [
        ('A4 Estándar', 'Hoja tamaño A4 (210 x 297 mm)', Decimal('10.00')),
        ('Carta', 'Hoja tamaño carta (216 x 279 mm)', Decimal('12.00')),
        ('Oficio', 'Hoja tamaño oficio (216 x 330 mm)', Decimal('15.00')),
    ]

    ACTION_NAMES = {
        'leer': 'Read',
        'escribir': 'Create',
        'editar': 'Edit',
        'eliminar': 'Delete',
    }

    def add_arguments(self, parser):
        parser.add_argument(
            '--skip-prices',
            action='store_true',
            help='Do not write default price settings',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created_permissions = 0
        for module_config in self.MODULES:
            module, created = SystemModule.objects.update_or_create(
                code=module_config['code'],
                defaults={
                    'name': module_config['name'],
                    'icon': module_config['icon'],
                    'order': module_config['order'],
                    'is_active': True,
                }
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created module: {module.code}'))

            for code in MODULE_PERMISSION_CODES[module.code]:
                action = code.rsplit('_', 1)[-1]
                _, created = AtomicPermission.objects.get_or_create(
                    code=code,
                    defaults={
                        'module': module,
                        'name': f"{self.ACTION_NAMES.get(action, action)} {module.name}",
                    }
                )
                created_permissions += created

        owner_role = get_owner_role()
        owner_role.permissions.set(AtomicPermission.objects.filter(is_active=True))

        # workers start with read access only
        worker_role = get_worker_role()
        worker_role.permissions.set(AtomicPermission.objects.filter(code__endswith='_leer', is_active=True))

        self.stdout.write(self.style.SUCCESS(
            f'✓ Roles ready: {owner_role.name} ({owner_role.permissions.count()} permissions), '
            f'{worker_role.name} ({worker_role.permissions.count()} permissions)'
        ))

        for name, description, unit_cost in self.PAPER_TYPES:
            _, created = PaperType.objects.get_or_create(
                name=name,
                defaults={'description': description, 'unit_cost': unit_cost}
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created paper type: {name}'))

        if not options['skip_prices']:
            current = get_price_config()
            written = save_price_config({key: current[key] for key in DEFAULT_PRICES})
            self.stdout.write(f'  Price settings stored: {", ".join(written)}')

        self.stdout.write(self.style.SUCCESS(f'\nDone. {created_permissions} new atomic permissions.'))
