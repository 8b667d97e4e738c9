from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('register-token/', views.register_token, name='register-token'),
    path('token/<str:token>/', views.remove_token, name='remove-token'),
    path('send/', views.send_household_notification, name='send'),
]
