from .collections import ApiState, CollectionState


SUGGESTION_LIMIT = 5


class WorkerList(CollectionState):
    """Workers with search over names, email and locker number"""
    endpoint = 'workers/'
    search_fields = ('nombres', 'apellidos', 'email', 'ropera')
    filter_defaults = {'status': 'all', 'department': 'all', 'ocupacion': 'all'}

    def matches_filter(self, item, name, value):
        if name == 'status':
            if value == 'active':
                return bool(item.get('activo'))
            if value == 'inactive':
                return not item.get('activo')
            return True
        if name == 'department':
            return item.get('departamento') == value
        return super().matches_filter(item, name, value)

    def _set_status(self, pk, activo):
        return self.session.patch(f"{self.detail_path(pk)}status/", {'activo': activo})

    def toggle_status(self, pk, activo=None):
        """Flip (or set) ``activo``; the local copy only changes after the API accepts it"""
        if activo is None:
            current = next((item for item in self.items if item.get('id') == pk), None)
            activo = not (current or {}).get('activo', False)
        worker = self._call(self._set_status, pk, activo)
        if worker is None:
            return None
        self.replace_item(pk, worker)
        self.success = 'Worker activated' if activo else 'Worker deactivated'
        return worker


class DepartmentsAndOccupations(ApiState):
    """
    Department and occupation name lists used by the worker form.
    Department mutations refetch the list afterwards.
    """

    departments_endpoint = 'departments/'
    occupations_endpoint = 'workers/occupations/'

    def __init__(self, session):
        super().__init__(session)
        self.departments = []
        self.occupations = []

    def fetch_departments(self):
        data = self._call(self.session.get, self.departments_endpoint)
        if data is not None:
            self.departments = list(data)
        return data is not None

    def fetch_occupations(self):
        data = self._call(self.session.get, self.occupations_endpoint)
        if data is not None:
            self.occupations = list(data)
        return data is not None

    def fetch(self):
        departments = self.fetch_departments()
        occupations = self.fetch_occupations()
        return departments and occupations

    def _delete_department(self, pk):
        self.session.delete(f"{self.departments_endpoint}{pk}/")
        return pk

    def create_department(self, nombre):
        if self._call(self.session.post, self.departments_endpoint, {'nombre': nombre}) is None:
            return False
        return self.fetch_departments()

    def update_department(self, pk, nombre):
        if self._call(self.session.put, f"{self.departments_endpoint}{pk}/", {'nombre': nombre}) is None:
            return False
        return self.fetch_departments()

    def delete_department(self, pk):
        if self._call(self._delete_department, pk) is None:
            return False
        return self.fetch_departments()

    def create_occupation(self, nombre):
        if self._call(self.session.post, self.occupations_endpoint, {'nombre': nombre}) is None:
            return False
        return self.fetch_occupations()

    def department_suggestions(self, text):
        if not text:
            return []
        needle = text.lower()
        return [dept for dept in self.departments if needle in dept['nombre'].lower()][:SUGGESTION_LIMIT]

    def occupation_suggestions(self, text):
        if not text:
            return []
        needle = text.lower()
        return [name for name in self.occupations if needle in name.lower()][:SUGGESTION_LIMIT]
