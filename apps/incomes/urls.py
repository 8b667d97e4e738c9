from django.urls import path
from . import views

app_name = 'incomes'

urlpatterns = [
    path('', views.incomes, name='incomes'),
    path('summary/', views.income_summary, name='summary'),
    path('<uuid:income_id>/', views.income_detail, name='detail'),
]
