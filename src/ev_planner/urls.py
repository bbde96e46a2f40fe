from django.urls import path

from ev_planner import views

urlpatterns = [
    path("api/v1/health", views.health_view, name="health"),
    path("api/v1/trip", views.trip_view, name="trip"),
    path("api/v1/trip/routes", views.request_routes_view, name="trip-routes"),
    path("api/v1/trip/refresh", views.refresh_view, name="trip-refresh"),
    path("api/v1/trip/select", views.select_route_view, name="trip-select"),
    path("api/v1/efficiency-tip", views.efficiency_tip_view, name="efficiency-tip"),
]
