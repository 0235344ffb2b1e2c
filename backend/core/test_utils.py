"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.access.models import AtomicPermission, Membership, Role, SpecialPermission, WorkGroup
from backend.access.services import MODULE_PERMISSION_CODES, get_owner_role, get_worker_role
from backend.inventory.models import InventoryCategory, InventoryItem
from backend.photocopies.models import PaperType, PhotocopyRecord
from backend.workers.models import Department, Worker
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', rol_global='trabajador',
                    es_propietario=False, is_staff=False, first_name='', last_name=''):
        """Create a test user (a plain worker unless told otherwise)"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            rol_global=rol_global,
            es_propietario=es_propietario,
            is_staff=is_staff,
            first_name=first_name,
            last_name=last_name,
        )

    @staticmethod
    def create_owner(username=None):
        """Create a global owner together with a group they own"""
        user = TestDataFactory.create_user(username=username, rol_global='propietario', es_propietario=True)
        TestDataFactory.create_group(owner=user)
        return user

    @staticmethod
    def create_group(owner, name=None, is_personal=False):
        """Create a work group and enrol its owner"""
        group = WorkGroup.objects.create(
            name=name or f'Group_{TestDataFactory.random_string(6)}',
            owner=owner,
            is_personal=is_personal,
        )
        Membership.objects.create(user=owner, group=group, role=get_owner_role(), status='activo')
        return group

    @staticmethod
    def create_membership(user, group, role=None, status='activo'):
        """Enrol a user in a group (worker role by default)"""
        return Membership.objects.create(
            user=user,
            group=group,
            role=role or get_worker_role(),
            status=status,
        )

    @staticmethod
    def get_permission(code):
        """Atomic permission by code, created on first use"""
        permission, _ = AtomicPermission.objects.get_or_create(code=code, defaults={'name': code})
        return permission

    @staticmethod
    def grant_permission(user, *codes, status='activo'):
        """Grant atomic permissions to a user as special grants"""
        for code in codes:
            SpecialPermission.objects.update_or_create(
                user=user,
                permission=TestDataFactory.get_permission(code),
                defaults={'status': status},
            )
        return user

    @staticmethod
    def grant_module(user, module):
        """Grant every atomic permission of a module"""
        return TestDataFactory.grant_permission(user, *MODULE_PERMISSION_CODES[module])

    @staticmethod
    def create_role(name=None, codes=()):
        """Create a role holding the given permission codes"""
        role = Role.objects.create(name=name or f'Role_{TestDataFactory.random_string(6)}')
        for code in codes:
            role.permissions.add(TestDataFactory.get_permission(code))
        return role

    @staticmethod
    def create_paper_type(name=None, unit_cost=None):
        """Create a test paper type"""
        if not name:
            name = f'Paper_{TestDataFactory.random_string(6)}'
        return PaperType.objects.create(
            name=name,
            unit_cost=unit_cost if unit_cost is not None else Decimal('10.00'),
        )

    @staticmethod
    def create_photocopy(user, group, cantidad=1, multiplicador=1, tipo='bn', doble_hoja=False,
                         registrado_en=None, comentario='', tipo_hoja=None):
        """Create a test photocopy record"""
        data = dict(
            cantidad=cantidad,
            multiplicador=multiplicador,
            tipo=tipo,
            doble_hoja=doble_hoja,
            comentario=comentario,
            tipo_hoja=tipo_hoja,
            usuario=user,
            grupo=group,
        )
        if registrado_en is not None:
            data['registrado_en'] = registrado_en
        return PhotocopyRecord.objects.create(**data)

    @staticmethod
    def create_department(group, nombre=None):
        """Create a test department"""
        return Department.objects.create(
            nombre=nombre or f'Dept_{TestDataFactory.random_string(6)}',
            grupo=group,
        )

    @staticmethod
    def create_worker(group, nombres=None, apellidos='Tester', departamento=None, activo=True, **extra):
        """Create a test worker"""
        return Worker.objects.create(
            nombres=nombres or f'Worker_{TestDataFactory.random_string(6)}',
            apellidos=apellidos,
            grupo=group,
            departamento=departamento,
            activo=activo,
            **extra
        )

    @staticmethod
    def create_inventory_category(group, nombre=None):
        """Create a test inventory category"""
        return InventoryCategory.objects.create(
            nombre=nombre or f'Category_{TestDataFactory.random_string(6)}',
            grupo=group,
        )

    @staticmethod
    def create_inventory_item(group, codigo=None, nombre=None, categoria=None, **extra):
        """Create a test inventory item"""
        return InventoryItem.objects.create(
            codigo=codigo or f'CCI-{TestDataFactory.random_string(6).upper()}',
            nombre=nombre or f'Item_{TestDataFactory.random_string(6)}',
            categoria=categoria,
            grupo=group,
            **extra
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
