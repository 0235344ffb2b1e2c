"""
In-memory list state for a REST collection.

The whole collection is fetched once; searching, filtering, sorting and
pagination happen locally. Mutations call the API and then patch the local
list with the server's answer instead of refetching.
"""
import logging
import math

import requests

from .api import ApiError

logger = logging.getLogger(__name__)

ALL = 'all'


class ApiState:
    """Loading flag plus the error/success messages of the last API call"""

    def __init__(self, session):
        self.session = session
        self.loading = False
        self.error = None
        self.success = None

    def _call(self, operation, *args, **kwargs):
        """Run an API call; failures are recorded in ``error`` and give ``None``"""
        self.loading = True
        try:
            result = operation(*args, **kwargs)
        except (ApiError, requests.RequestException) as e:
            logger.error(f"{self.__class__.__name__}: {str(e)}")
            self.error = e.message if isinstance(e, ApiError) else str(e)
            self.success = None
            return None
        finally:
            self.loading = False
        self.error = None
        return result

    def clear_messages(self):
        self.error = None
        self.success = None


class CollectionState(ApiState):
    endpoint = None
    search_fields = ()
    filter_defaults = {}
    items_per_page = 10

    def __init__(self, session, items_per_page=None):
        super().__init__(session)
        self.items = []
        self.search = ''
        self.filters = dict(self.filter_defaults)
        self.sort_key = None
        self.sort_direction = 'asc'
        self.current_page = 1
        if items_per_page:
            self.items_per_page = items_per_page

    def detail_path(self, pk):
        return f"{self.endpoint}{pk}/"

    def fetch(self):
        """Load the whole collection; on failure the previous list is kept"""
        data = self._call(self.session.get, self.endpoint)
        if data is None:
            return False
        self.items = list(data)
        return True

    # Mutations

    def create(self, data):
        item = self._call(self.session.post, self.endpoint, data)
        if item is not None:
            self.items.append(item)
            self.success = 'Created successfully'
        return item

    def update(self, pk, data):
        item = self._call(self.session.put, self.detail_path(pk), data)
        if item is not None:
            self.replace_item(pk, item)
            self.success = 'Updated successfully'
        return item

    def _delete_remote(self, pk):
        self.session.delete(self.detail_path(pk))
        return pk

    def delete(self, pk):
        if self._call(self._delete_remote, pk) is None:
            return False
        self.items = [item for item in self.items if item.get('id') != pk]
        self.success = 'Deleted successfully'
        return True

    def replace_item(self, pk, new_item):
        self.items = [new_item if item.get('id') == pk else item for item in self.items]

    # Search, filters and sorting

    def set_search(self, text):
        self.search = text or ''
        self.current_page = 1

    def set_filter(self, name, value):
        if name not in self.filter_defaults:
            raise KeyError(f"Unknown filter: {name}")
        self.filters[name] = ALL if value in (None, '') else value
        self.current_page = 1

    def reset_filters(self):
        self.search = ''
        self.filters = dict(self.filter_defaults)
        self.current_page = 1

    def matches_search(self, item):
        needle = self.search.lower()
        if not needle:
            return True
        for field in self.search_fields:
            value = item.get(field)
            if value is not None and needle in str(value).lower():
                return True
        return False

    def matches_filter(self, item, name, value):
        """Equality filter; subclasses map filter names that differ from fields"""
        return item.get(name) == value

    def matches(self, item):
        if not self.matches_search(item):
            return False
        return all(
            self.matches_filter(item, name, value)
            for name, value in self.filters.items()
            if value != ALL
        )

    def sort_by(self, key):
        """Sort by ``key``; asking for the current key again flips the direction"""
        if self.sort_key == key:
            self.sort_direction = 'desc' if self.sort_direction == 'asc' else 'asc'
        else:
            self.sort_key = key
            self.sort_direction = 'asc'

    def _sort_value(self, item):
        value = item.get(self.sort_key)
        return value.lower() if isinstance(value, str) else value

    def filtered_items(self):
        items = [item for item in self.items if self.matches(item)]
        if not self.sort_key:
            return items
        # missing values stay last in both directions
        present = [item for item in items if item.get(self.sort_key) is not None]
        missing = [item for item in items if item.get(self.sort_key) is None]
        present.sort(key=self._sort_value, reverse=self.sort_direction == 'desc')
        return present + missing

    # Pagination

    def set_page(self, page):
        self.current_page = max(1, int(page))

    def set_items_per_page(self, items_per_page):
        self.items_per_page = max(1, int(items_per_page))
        self.current_page = 1

    def page(self):
        items = self.filtered_items()
        total_items = len(items)
        start = (self.current_page - 1) * self.items_per_page
        return {
            'items': items[start:start + self.items_per_page],
            'total_items': total_items,
            'total_pages': math.ceil(total_items / self.items_per_page),
            'current_page': self.current_page,
            'items_per_page': self.items_per_page,
        }
