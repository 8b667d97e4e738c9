from django.urls import path
from . import views
from .services import ExpenseScope

app_name = 'expenses'

urlpatterns = [
    path('', views.expenses, name='expenses'),

    # Totals
    path('summary/', views.expense_summary, name='summary'),
    path('summary/shared/', views.expense_summary, {'scope': ExpenseScope.SHARED}, name='summary-shared'),
    path('summary/personal/', views.expense_summary, {'scope': ExpenseScope.PERSONAL}, name='summary-personal'),
    path('summary/mine/', views.expense_summary, {'scope': ExpenseScope.MINE}, name='summary-mine'),

    # Purchase history
    path('history/shared/', views.purchase_history, {'scope': ExpenseScope.SHARED}, name='history-shared'),
    path('history/personal/', views.purchase_history, {'scope': ExpenseScope.PERSONAL}, name='history-personal'),

    path('<uuid:expense_id>/', views.expense_detail, name='detail'),
]
