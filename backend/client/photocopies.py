from backend.photocopies.calculations import summarize_records
from .collections import CollectionState


class PhotocopyList(CollectionState):
    """Photocopy records with a running summary of the filtered list"""
    endpoint = 'photocopies/'
    search_fields = ('comentario', 'usuario_nombre', 'tipo')
    filter_defaults = {'tipo': 'all', 'doble_hoja': 'all'}

    def summary(self):
        """Copies, sheets and colour split of the records currently shown"""
        totals = summarize_records(self.filtered_items())
        return {
            'total_copias': totals['total_copias'],
            'total_hojas': totals['total_hojas'],
            'total_bn': totals['total_bn'],
            'total_color': totals['total_color'],
        }
