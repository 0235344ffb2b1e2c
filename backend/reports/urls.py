from django.urls import path
from . import views

urlpatterns = [
    path('reports/photocopies/statistics/', views.photocopy_statistics, name='photocopy-statistics'),
    path('reports/photocopies/analysis/', views.photocopy_analysis, name='photocopy-analysis'),
    path('reports/photocopies/prices/', views.photocopy_prices, name='photocopy-prices'),
    path('reports/photocopies/activity/', views.photocopy_activity, name='photocopy-activity'),
    path('reports/photocopies/export/pdf/', views.export_pdf, name='photocopy-export-pdf'),
    path('reports/photocopies/export/excel/', views.export_excel, name='photocopy-export-excel'),
]
