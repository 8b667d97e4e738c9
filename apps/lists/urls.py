from django.urls import path
from . import views

app_name = 'lists'

urlpatterns = [
    path('', views.shopping_lists, name='lists'),
    path('<uuid:list_id>/', views.shopping_list_detail, name='detail'),
    path('<uuid:list_id>/items/', views.list_items, name='items'),
    path('<uuid:list_id>/items/<uuid:item_id>/', views.list_item_detail, name='item-detail'),
    path('<uuid:list_id>/items/<uuid:item_id>/purchased/', views.item_purchased, name='item-purchased'),
    path('<uuid:list_id>/history/', views.list_history, name='history'),
]
