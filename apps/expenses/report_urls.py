from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('by-payer/', views.report_by_payer, name='by-payer'),
    path('by-category/', views.report_by_category, name='by-category'),
    path('balance/', views.report_balance, name='balance'),
]
