from django.urls import path
from . import views

app_name = 'households'

urlpatterns = [
    # Caller's households
    path('me/', views.my_household, name='my-household'),
    path('me/all/', views.my_households, name='my-households'),
    path('me/switch/', views.switch_household, name='switch'),
    path('me/members/', views.my_members, name='my-members'),
    path('me/members/register/', views.register_household_member, name='register-member'),

    # Invitations and lookups
    path('invitations/', views.invite, name='invite'),
    path('invitations/accept/', views.accept_invitation, name='accept-invitation'),
    path('search-user/', views.search_user, name='search-user'),

    # A specific household
    path('<uuid:household_id>/', views.household_detail, name='detail'),
    path('<uuid:household_id>/members/', views.household_members, name='members'),
    path(
        '<uuid:household_id>/members/<uuid:member_user_id>/',
        views.remove_household_member,
        name='remove-member',
    ),
    path(
        '<uuid:household_id>/members/<uuid:member_user_id>/role/',
        views.set_member_role,
        name='member-role',
    ),
    path('<uuid:household_id>/invitations/', views.household_invitations, name='invitations'),
    path(
        '<uuid:household_id>/invitations/<uuid:invitation_id>/',
        views.revoke_invitation,
        name='revoke-invitation',
    ),
]
