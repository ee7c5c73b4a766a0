from django.urls import path
from . import views

app_name = 'kds'

urlpatterns = [
    path('stations/<str:station>/queue/', views.StationQueueView.as_view(), name='station_queue'),
    path(
        'orders/<uuid:order_id>/items/<int:item_index>/advance/',
        views.AdvanceItemView.as_view(),
        name='advance_item',
    ),
    path('orders/<uuid:order_id>/ready-all/', views.ReadyAllView.as_view(), name='ready_all'),
    path('undo/', views.UndoView.as_view(), name='undo'),
]
